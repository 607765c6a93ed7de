from gql import gql

from ..resolvers import forwarded_auth, many, single, upstream
from ..subgraph import Subgraph
from ..upstream import path_segment

type_defs = gql(
    """
  type Query {
    getListing(id: ID!): Listing
    searchListings(query: String, condition: String, minPrice: Float, maxPrice: Float): [Listing]
    recentListings: [Listing]
    myListings: [Listing]
  }

  type Listing @key(fields: "id") {
    id: ID!
    title: String!
    description: String
    price: Float
    condition: String
    ownerId: ID!
    postedAt: String
    seller: User
    imageUrl: String
    courseCode: String
  }

  type User @key(fields: "id") @extends {
    id: ID! @external
    listings: [Listing]
  }
"""
)

subgraph = Subgraph('listing', type_defs)


def query_value(value):
    # whole floats go out as 10, not 10.0
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


@subgraph.query('getListing')
@single
async def get_listing(_, info, id):
    return await upstream(info).get_json(f'/api/books/{path_segment(id)}')


@subgraph.query('searchListings')
@many
async def search_listings(_, info, query=None, condition=None, min_price=None, max_price=None):
    filters = {'query': query, 'condition': condition, 'minPrice': min_price, 'maxPrice': max_price}
    params = {name: query_value(value) for name, value in filters.items() if value is not None}
    return await upstream(info).get_json('/api/books/search', params=params)


@subgraph.query('recentListings')
@many
async def recent_listings(_, info):
    return await upstream(info).get_json('/api/books')


@subgraph.query('myListings')
@many
async def my_listings(_, info):
    return await upstream(info).get_json('/api/books/my-listings', headers=forwarded_auth(info))


@subgraph.field('Listing', 'seller')
def resolve_listing_seller(listing, info):
    return info.context['references'].make_reference('User', {'id': listing.get('ownerId')}).to_dict()


@subgraph.field('User', 'listings')
@many
async def resolve_user_listings(user, info):
    return await upstream(info).get_json('/api/books', params={'ownerId': user['id']})
