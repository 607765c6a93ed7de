from gql import gql

from ..resolvers import many, upstream
from ..subgraph import Subgraph
from ..upstream import path_segment

type_defs = gql(
    """
  type Query {
    getReceivedMessages(userId: ID!): [Message]
    getMessagesBetween(userId1: ID!, userId2: ID!): [Message]
  }

  type Message @key(fields: "id") {
    id: ID!
    senderId: ID!
    receiverId: ID!
    content: String!
    timestamp: String!
  }
"""
)

subgraph = Subgraph('messaging', type_defs)


@subgraph.query('getReceivedMessages')
@many
async def received_messages(_, info, user_id):
    return await upstream(info).get_json(f'/api/messages/received/{path_segment(user_id)}')


@subgraph.query('getMessagesBetween')
@many
async def messages_between(_, info, user_id1, user_id2):
    return await upstream(info).get_json(
        f'/api/messages/between/{path_segment(user_id1)}/{path_segment(user_id2)}'
    )
