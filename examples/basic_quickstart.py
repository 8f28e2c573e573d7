from dataclasses import dataclass, field
from typing import List

from rulefilter import Authorizer, InMemoryQueryable, InMemoryStrategy, Rule, RuleSet


@dataclass
class Tag:
    name: str


@dataclass
class Article:
    owner_id: int
    status: str = "draft"
    tags: List[Tag] = field(default_factory=list)


def main() -> None:
    rules = RuleSet(
        [
            Rule("read", "Article", {"status": "published"}, rule_id="public"),
            Rule("read", "Article", {"owner_id": 42}, rule_id="own"),
            Rule("update", "Article", {"owner_id": 42, "tags": {"name": "editable"}}),
        ],
        precedence="last-defined-wins",
    )
    authz = Authorizer(rules, strategy=InMemoryStrategy(), combine="union")

    mine = Article(42, tags=[Tag("editable")])
    theirs = Article(7, status="published")
    print(authz.can("read", mine), authz.can("read", theirs))  # True True
    print(authz.can("update", mine), authz.can("update", theirs))  # True False

    store = InMemoryQueryable([mine, theirs, Article(7)])
    print(len(authz.accessible_by(store, "read", subject_type="Article")))  # 2


if __name__ == "__main__":
    main()
