from hypothesis import given, strategies as st

from chaos_theorist.access import AccessPolicy
from chaos_theorist.gateway.seed import build_systems

ids = st.sampled_from(["a", "b", "c", "d", "e"])


class Entry:
    def __init__(self, id):
        self.id = id


def test_filter_preserves_catalog_order():
    systems = build_systems()
    policy = AccessPolicy.from_ids(["supply-chain-resilience-v1", "financial-market-stability-v1"])
    assert [s.id for s in policy.filter(systems)] == [
        "financial-market-stability-v1",
        "supply-chain-resilience-v1",
    ]
    assert policy.allows("supply-chain-resilience-v1")
    assert not policy.allows("unlisted")


def test_empty_policy_hides_everything():
    assert AccessPolicy().filter(build_systems()) == []


@given(catalog=st.lists(ids, max_size=8), allowed=st.lists(ids, max_size=5))
def test_filter_is_an_ordered_subset(catalog, allowed):
    entries = [Entry(i) for i in catalog]
    policy = AccessPolicy.from_ids(allowed)

    visible = policy.filter(entries)

    assert [e.id for e in visible] == [i for i in catalog if i in allowed]
    assert all(any(v is e for e in entries) for v in visible)
    assert [e.id for e in entries] == catalog
    assert len(policy.allowed_systems) == len(set(allowed))
