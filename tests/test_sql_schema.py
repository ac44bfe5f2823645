import pytest

from collectionql.core.conditions import TRUE, field_condition, field_equals, or_
from collectionql.core.identity import serialize
from collectionql.interface import INTEGER, STRING, EnumType, Inventory, NullableType
from collectionql.registry import BuildOptions, CollectionSchema
from collectionql.sql import SQLAlchemyPaginator, add_models, collection_from_model
from tests.models import Post, PostComment, PostStatus, User


def _inventory():
    inventory = Inventory()
    add_models(inventory, User, Post, PostComment)
    return inventory


def _schema(inventory=None):
    # every table has an ``id`` column, so the global id gets its own name
    return CollectionSchema(inventory or _inventory(), BuildOptions(node_id_field_name='nodeId')).to_strawberry()


def test_collection_from_model_fields_and_descriptions():
    c = collection_from_model(Post)
    assert c.name == 'posts'
    assert c.type.name == 'Post'
    assert c.description == 'Blog posts'
    assert list(c.type.fields) == ['id', 'title', 'content', 'author_id', 'status', 'metadata_json']
    assert c.type.fields['id'].type is INTEGER
    assert c.type.fields['content'].type == NullableType(STRING)
    assert c.type.fields['title'].description == 'Post title'
    assert c.type.fields['metadata_json'].description == 'Arbitrary metadata'
    status = c.type.fields['status'].type
    assert isinstance(status, EnumType)
    assert status.name == 'PostStatus'
    assert list(status.variants) == ['draft', 'published', 'archived']
    assert c.primary_key.fields == ('id',)
    assert isinstance(c.paginator, SQLAlchemyPaginator)
    assert collection_from_model(User).description == 'Application users (docstring)'


def test_relations_from_many_to_one_relationships():
    inventory = _inventory()
    rels = [(r.name, r.head_collection.name, r.tail_collection.name) for r in inventory.get_relations()]
    assert rels == [
        ('author', 'users', 'posts'),
        ('post', 'posts', 'post_comments'),
        ('author', 'users', 'post_comments'),
    ]
    post_author = inventory.get_relations()[0]
    assert post_author.head_key is None
    assert post_author.get_tail_condition_from_head_value(User(id=7)) == field_equals('author_id', 7)


def test_schema_field_names():
    schema = _schema()
    sdl = str(schema)
    assert 'type User implements Node' in sdl
    assert 'enum PostStatus' in sdl

    def names(type_name):
        return [f.graphql_name for f in schema.get_type_by_name(type_name).fields]

    assert names('User') == ['nodeId', 'id', 'name', 'email', 'isAdmin', 'createdAt', 'postsByAuthor', 'postCommentsByAuthor']
    assert names('Post') == ['nodeId', 'id', 'title', 'content', 'authorId', 'status', 'metadataJson', 'userByAuthor', 'postCommentsByPost']
    assert names('PostComment')[-2:] == ['postByPost', 'userByAuthor']
    assert names('Query') == ['node', 'allUsers', 'allPosts', 'allPostComments', 'user', 'post', 'postComment']


@pytest.mark.asyncio
async def test_sql_root_connection(db_session, populated_db):
    schema = _schema()
    query = """
    query {
      allUsers(first: 2) {
        totalCount
        pageInfo { hasNextPage }
        nodes { name isAdmin }
      }
    }
    """
    res = await schema.execute(query, context_value={'db_session': db_session})
    assert res.errors is None, res.errors
    conn = res.data['allUsers']
    assert conn['totalCount'] == 4
    assert conn['pageInfo']['hasNextPage'] is True
    assert conn['nodes'] == [{'name': 'Alice Johnson', 'isAdmin': True}, {'name': 'Bob Smith', 'isAdmin': False}]


@pytest.mark.asyncio
async def test_sql_forward_and_reverse_fields(db_session, populated_db):
    schema = _schema()
    query = """
    query {
      allUsers(condition: {email: "alice@example.com"}) {
        nodes {
          name
          postsByAuthor(condition: {status: PUBLISHED}) {
            totalCount
            nodes {
              title
              status
              userByAuthor { name }
              postCommentsByPost { nodes { content userByAuthor { name } } }
            }
          }
        }
      }
    }
    """
    res = await schema.execute(query, context_value={'db_session': db_session})
    assert res.errors is None, res.errors
    alice = res.data['allUsers']['nodes'][0]
    posts = alice['postsByAuthor']
    assert posts['totalCount'] == 2
    assert [p['title'] for p in posts['nodes']] == ['First Post', 'GraphQL is Great']
    assert {p['status'] for p in posts['nodes']} == {'PUBLISHED'}
    assert posts['nodes'][0]['userByAuthor'] == {'name': 'Alice Johnson'}
    comments = posts['nodes'][0]['postCommentsByPost']['nodes']
    assert [(c['content'], c['userByAuthor']['name']) for c in comments] == [
        ('Great post!', 'Bob Smith'),
        ('Thanks for sharing', 'Charlie Brown'),
    ]


@pytest.mark.asyncio
async def test_sql_condition_with_null(db_session, populated_db):
    schema = _schema()
    res = await schema.execute(
        "query { allPosts(condition: {content: null}) { nodes { title } } }",
        context_value={'db_session': db_session},
    )
    assert res.errors is None, res.errors
    assert res.data['allPosts']['nodes'] == [{'title': 'Draft from Charlie'}]


@pytest.mark.asyncio
async def test_sql_node_and_typed_lookup(db_session, populated_db):
    inventory = _inventory()
    schema = _schema(inventory)
    post = populated_db['posts'][2]
    gid = serialize(inventory.get_collection('posts'), post)
    query = """
    query($id: ID!) {
      node(id: $id) { __typename nodeId ... on Post { title } }
      post(id: $id) { title metadataJson }
    }
    """
    res = await schema.execute(query, variable_values={'id': gid}, context_value={'db_session': db_session})
    assert res.errors is None, res.errors
    assert res.data['node'] == {'__typename': 'Post', 'nodeId': gid, 'title': 'SQLAlchemy Tips'}
    assert res.data['post'] == {'title': 'SQLAlchemy Tips', 'metadataJson': None}


@pytest.mark.asyncio
async def test_sql_missing_session_is_an_error(populated_db):
    schema = _schema()
    res = await schema.execute("query { allUsers { nodes { name } } }", context_value={})
    assert res.errors is not None
    assert 'No database session' in res.errors[0].message


@pytest.mark.asyncio
async def test_sql_paginator_compiles_operators(db_session, populated_db):
    paginator = SQLAlchemyPaginator(PostComment)
    ctx = {'db_session': db_session}
    assert await paginator.count(ctx, TRUE) == 4
    assert await paginator.count(ctx, field_condition('rate', 'gte', 4)) == 2
    assert await paginator.count(ctx, or_(field_equals('rate', 2), field_condition('content', 'like', 'Very%'))) == 2
    rows = await paginator.fetch(ctx, field_condition('rate', 'in', [3, 5]), 0, None)
    assert [r.rate for r in rows] == [5, 3]
    post_status_rows = await SQLAlchemyPaginator(Post).fetch(ctx, field_equals('status', 'draft'), 0, 10)
    assert [p.status for p in post_status_rows] == [PostStatus.DRAFT]
