import random

from webfuzz.arbitraries import ADVERSARIAL_CORPUS, malicious_string
from webfuzz.arbitraries.strings import CORPUS


def test_corpus_contains_the_canonical_script_payload():
    assert "<script>alert(1)</script>" in ADVERSARIAL_CORPUS
    assert "' OR '1'='1" in ADVERSARIAL_CORPUS
    assert "../../../etc/passwd" in ADVERSARIAL_CORPUS


def test_corpus_covers_every_category():
    for category in ("markup", "sql", "traversal", "command", "control", "unicode", "oversized", "numeric"):
        assert CORPUS[category], category
    assert sorted(len(s) for s in CORPUS["oversized"]) == [1000, 10000, 65536]


def test_malicious_string_eventually_yields_script_payload():
    arb = malicious_string()
    rng = random.Random(42)
    samples = [arb.draw(rng).value for _ in range(3000)]
    assert "<script>alert(1)</script>" in samples


def test_malicious_string_replays_from_seed():
    arb = malicious_string()
    first = [arb.draw(random.Random(seed)).value for seed in range(100)]
    second = [arb.draw(random.Random(seed)).value for seed in range(100)]
    assert first == second


def test_random_strings_shrink_toward_corpus_members():
    arb = malicious_string()
    rng = random.Random(8)
    for _ in range(500):
        node = arb.draw(rng)
        if node.value not in ADVERSARIAL_CORPUS:
            assert next(node.shrink()).value == ADVERSARIAL_CORPUS[0]
            return
    raise AssertionError("no random-string branch was drawn")
