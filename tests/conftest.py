"""Shared fixtures."""

import os
import sys

import pytest
from loguru import logger

from graphql_client_generation.core.parser import SchemaParser

SAMPLE_SDL = '''
"""An ISO 8601 timestamp"""
scalar DateTime

enum Role {
  ADMIN
  MEMBER
}

interface Node {
  id: ID!
}

"""A person using the service"""
type User implements Node {
  id: ID!
  name: String!
  role: Role!
  createdAt: DateTime
  friends: [User!]!
  posts(first: Int): [Post!]!
  avatar(size: Int!): String
}

type Post implements Node {
  id: ID!
  title: String!
  author: User!
}

union SearchResult = User | Post

input CreatePostInput {
  title: String!
  tags: [String!]
}

input ProjectInput {
  name: String!
}

type ProjectMutations {
  posts: PostMutations!
  rename(input: ProjectInput!): Boolean!
}

type PostMutations {
  create(input: CreatePostInput!): Post
}

type Query {
  user(id: ID!): User
  users(role: Role): [User!]!
  search(text: String!): [SearchResult!]!
  now: DateTime!
}

type Mutation {
  project(projectId: ID!, input: ProjectInput): ProjectMutations!
}
'''


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop sinks added during a test so they never outlive captured streams."""
    yield
    logger.remove()


@pytest.fixture
def sample_sdl():
    return SAMPLE_SDL


@pytest.fixture
def sample_ir():
    """IR of the sample schema."""
    return SchemaParser().parse_sdl(SAMPLE_SDL)


@pytest.fixture
def schema_dir(tmp_path):
    """A resources folder holding the sample schema as schema.graphql."""
    folder = tmp_path / "resources"
    folder.mkdir()
    (folder / "schema.graphql").write_text(SAMPLE_SDL)
    return folder


@pytest.fixture
def isolated_modules():
    """Forget generated packages imported by a test."""
    before = set(sys.modules)
    yield
    for name in set(sys.modules) - before:
        if name.startswith("acme"):
            del sys.modules[name]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run from an empty directory with no GQLGEN_* variables set."""
    for key in list(os.environ):
        if key.startswith("GQLGEN_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    return tmp_path
