from gql import gql

from ..resolvers import forwarded_auth, single, upstream
from ..subgraph import Subgraph
from ..upstream import path_segment

type_defs = gql(
    """
  type Query {
    getUser(id: ID!): User
    currentUser: User
  }

  type User @key(fields: "id") {
    id: ID!
    username: String!
    email: String!
    role: String!
    firstName: String
    lastName: String
    verified: Boolean
  }
"""
)

subgraph = Subgraph('user', type_defs)


@subgraph.query('getUser')
@single
async def get_user(_, info, id):
    return await upstream(info).get_json(f'/api/users/{path_segment(id)}')


@subgraph.query('currentUser')
@single
async def current_user(_, info):
    return await upstream(info).get_json('/api/auth/user', headers=forwarded_auth(info))
