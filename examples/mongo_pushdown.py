#!/usr/bin/env python3
"""
Push permission rules down to MongoDB.

Run (needs a local mongod and `pip install rulefilter[mongo]`):
  python examples/mongo_pushdown.py

The same resolved condition drives the in-memory check and the query filter,
so `can()` and `accessible_by()` agree record for record.
"""

import logging

from rulefilter import (
    Authorizer,
    MongoFilterConfig,
    MongoQueryable,
    MongoStrategy,
    Rule,
    RuleSet,
    ValueRange,
)
from rulefilter.logging.decision_logger import DecisionLogger


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(name)s %(message)s")

    rules = RuleSet(
        [
            Rule(
                "read",
                "Article",
                {
                    "status": ["draft", "published"],
                    "tags": {"name": "python", "score": ValueRange(3, 5)},
                },
            )
        ],
        precedence="last-defined-wins",
    )
    strategy = MongoStrategy(MongoFilterConfig(array_fields={"tags"}))
    authz = Authorizer(rules, strategy=strategy, logger_sink=DecisionLogger(as_json=True))

    print("filter:", strategy.native(authz.query("read", "Article")))

    articles = MongoQueryable.from_uri("mongodb://localhost:27017", "demo", "articles")
    for doc in authz.accessible_by(articles, "read", subject_type="Article"):
        assert authz.can("read", doc, subject_type="Article")
        print(doc.get("title"))


if __name__ == "__main__":
    main()
