"""Shared fixtures: sample schemas and run configurations."""

import pytest

from subgraph_schema_validator.config import Config

VALID_SCHEMA = """
type Token @entity @subgraphId(id: "abc123") {
  id: ID!
  name: String!
  owner: Account!
  transfers: [Transfer!]! @derivedFrom(field: "token")
}

type Account @entity {
  id: Bytes!
  tokens: [Token!]! @derivedFrom(field: "owner")
}

type Transfer @entity(immutable: true) {
  id: ID!
  token: Token!
  amount: BigInt!
  kind: TransferKind!
}

enum TransferKind {
  MINT
  BURN
  SEND
}
"""

TIMESERIES_SCHEMA = """
type Trade @entity(timeseries: true) {
  id: Int8!
  timestamp: Timestamp!
  token: Token!
  price: BigDecimal!
}

type Token @entity {
  id: Bytes!
  symbol: String!
}

type Stats @aggregation(intervals: ["hour", "day"], source: "Trade") {
  id: Int8!
  timestamp: Timestamp!
  token: Token!
  sum: BigDecimal! @aggregate(fn: "sum", arg: "price")
  count: Int8! @aggregate(fn: "count")
}
"""

FULLTEXT_SCHEMA = """
type _Schema_
  @fulltext(
    name: "bandSearch"
    language: en
    algorithm: rank
    include: [{ entity: "Band", fields: [{ name: "name" }, { name: "bio" }] }]
  )

type Band @entity {
  id: ID!
  name: String!
  bio: String
  members: [String!]!
}
"""


@pytest.fixture
def cfg() -> Config:
    """Configuration as the CLI builds it: fulltext search allowed."""
    return Config(allow_non_deterministic_fulltext_search=True)


@pytest.fixture
def strict_cfg() -> Config:
    return Config()
