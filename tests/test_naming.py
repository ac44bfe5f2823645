from collectionql.core.naming import (
    camel_to_snake, format_enum_value, format_field, format_type, python_name, split_words,
)


def test_camel_snake_helpers():
    assert camel_to_snake('postsByAuthor') == 'posts_by_author'
    assert camel_to_snake('HTTPServer') == 'http_server'
    assert camel_to_snake('already_snake') == 'already_snake'


def test_split_words_on_separators_and_case():
    assert split_words('posts-by-author') == ['posts', 'by', 'author']
    assert split_words('PostComment') == ['post', 'comment']
    assert split_words('post_status') == ['post', 'status']


def test_type_and_field_names():
    assert format_type('person') == 'Person'
    assert format_type('post_comment') == 'PostComment'
    assert format_field('posts-by-author') == 'postsByAuthor'
    assert format_field('Person-by-author') == 'personByAuthor'
    assert format_field('author_login') == 'authorLogin'
    assert format_field('all-people') == 'allPeople'


def test_enum_values_are_constant_case():
    assert format_enum_value('published') == 'PUBLISHED'
    assert format_enum_value('in progress') == 'IN_PROGRESS'
    assert format_enum_value(3) == '_3'


def test_python_names_round_trip_generated_fields():
    for gql in ('id', 'postsByAuthor', 'pageInfo', 'totalCount'):
        assert format_field(python_name(gql)) == gql
