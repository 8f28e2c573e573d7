import argparse
import statistics
import time

from rulefilter import Authorizer, MongoFilterConfig, MongoStrategy, Rule, RuleSet


def gen_rules(n: int) -> RuleSet:
    rules = []
    for i in range(n):
        rules.append(
            Rule(
                "read",
                "Doc",
                {"k": i, "tags": {"name": f"t{i}", "rank": [1, 2, 3]}},
                rule_id=f"permit_{i}",
            )
        )
    return RuleSet(rules, precedence="last-defined-wins")


def run(size: int, iters: int):
    authz = Authorizer(
        gen_rules(size),
        strategy=MongoStrategy(MongoFilterConfig(array_fields={"tags"})),
        combine="union",
    )
    doc = {"k": size // 2, "tags": [{"name": f"t{size // 2}", "rank": 2}]}
    check, query = [], []
    for _ in range(iters):
        t0 = time.perf_counter()
        allowed = authz.can("read", doc, subject_type="Doc")
        check.append((time.perf_counter() - t0) * 1000.0)
        t0 = time.perf_counter()
        authz.query("read", "Doc")
        query.append((time.perf_counter() - t0) * 1000.0)
    return {
        "check_p50": statistics.median(check),
        "query_p50": statistics.median(query),
        "allowed": allowed,
    }


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--sizes", type=int, nargs="+", default=[10, 50, 100, 500])
    ap.add_argument("--iters", type=int, default=200)
    args = ap.parse_args()
    print("size,check_p50_ms,query_p50_ms,allowed")
    for s in args.sizes:
        r = run(s, args.iters)
        print(f"{s},{r['check_p50']:.3f},{r['query_p50']:.3f},{r['allowed']}")


if __name__ == "__main__":
    main()
