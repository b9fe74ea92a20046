"""Shared fixtures: a small schema covering every type category."""

import sys
import types

import pytest
from graphql import parse

from gql_typegen.core.options import CodegenOptions
from gql_typegen.core.parser import SchemaParser
from gql_typegen.core.planner import OperationPlanner
from gql_typegen.core.query import QueryDocument

SCHEMA_SDL = '''
schema {
  query: Query
  mutation: Mutation
  subscription: Subscription
}

scalar DateTime

"Label attached to a user."
enum Tag {
  RED
  GREEN
  BLUE
}

interface Node {
  id: ID!
}

type User implements Node {
  id: ID!
  name: String
  tag: Tag
  friends: [User!]
  createdAt: DateTime
  oldName: String @deprecated(reason: "Use name")
  legacy: String @deprecated
  oldTag: Tag @deprecated(reason: "Tags moved")
  pet: Pet
  scores: [Int]!
}

type Dog implements Node {
  id: ID!
  name: String
  barks: Boolean!
}

type Cat implements Node {
  id: ID!
  name: String
  meows: Boolean!
}

type Bird implements Node {
  id: ID!
  wingspan: Float
}

union Pet = Dog | Cat | Bird

input UserFilter {
  name: String
  tag: Tag
  limit: Int
  nested: UserFilter
}

type Query {
  user(id: ID): User
  users(filter: UserFilter, limit: Int): [User!]!
  node(id: ID!): Node
  pet: Pet
  pets: [Pet!]!
}

type Mutation {
  rename(id: ID!, name: String!): User
}

type Subscription {
  userChanged: User
  petAdded: Pet
}
'''


def make_document(source: str) -> QueryDocument:
    return QueryDocument.from_ast(parse(source), source)


def load_generated(source: str, name: str) -> types.ModuleType:
    """Execute generated Python source as an importable module."""
    module = types.ModuleType(name)
    sys.modules[name] = module
    exec(compile(source, f"<{name}>", "exec"), module.__dict__)
    return module


@pytest.fixture
def schema():
    """A freshly parsed schema; required flags start cleared in every test."""
    return SchemaParser().parse_sdl(parse(SCHEMA_SDL))


@pytest.fixture
def plan_for(schema):
    """Plan one operation of a query document against the shared schema."""

    def _plan(source: str, operation: str | None = None, options: CodegenOptions | None = None):
        document = make_document(source)
        options = options or CodegenOptions()
        selected = document.get_operation(operation) if operation else document.operations[0]
        return OperationPlanner(schema, document, options).plan(selected)

    return _plan
