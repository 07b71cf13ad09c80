# tests/validator/test_identity_reference_checks.py
from taskval.validator.base import DatasetSnapshot
from taskval.validator.identity_checks import check_duplicate_ids
from taskval.validator.reference_checks import check_unknown_references


def _snapshot(clients=(), workers=(), tasks=(), rules=()):
    return DatasetSnapshot.from_inputs(clients, workers, tasks, rules)


def test_duplicate_key_collapses_to_one_finding(make_client):
    """
    @brief
    N records sharing one key produce exactly one error.

    @details
    The message carries the number of occurrences.
    """
    # --- Arrange ---
    snap = _snapshot([make_client("C1"), make_client("C1"), make_client("C1"), make_client("C2")])

    # --- Act ---
    findings = check_duplicate_ids(snap)

    # --- Assert ---
    assert len(findings) == 1
    f = findings[0]
    assert f.id == "duplicate-client-C1"
    assert f.field == "ClientID"
    assert f.entity_id == "C1"
    assert "appears 3 times" in f.message


def test_duplicates_follow_first_appearance(make_task):
    snap = _snapshot(
        tasks=[make_task("T9"), make_task("T2"), make_task("T2"), make_task("T9")]
    )
    assert [f.id for f in check_duplicate_ids(snap)] == ["duplicate-task-T9", "duplicate-task-T2"]


def test_duplicates_across_collections_are_independent(make_client, make_worker, make_task):
    snap = _snapshot(
        [make_client("X")],
        [make_worker("X"), make_worker("X")],
        [make_task("X")],
    )
    assert [f.id for f in check_duplicate_ids(snap)] == ["duplicate-worker-X"]


def test_blank_keys_are_not_duplicates(make_worker):
    snap = _snapshot(workers=[make_worker(None), make_worker(None), make_worker(" ")])
    assert check_duplicate_ids(snap) == []


def test_unknown_reference_once_per_client(make_client, make_task):
    """
    @brief
    Every absent requested ID is one error per client.

    @details
    A repeated request within one client is collapsed; another client
    requesting the same missing task gets its own finding.
    """
    # --- Arrange ---
    snap = _snapshot(
        [
            make_client("C1", RequestedTaskIDs=["T1", "T404", "T404", "T405"]),
            make_client("C2", RequestedTaskIDs=["T404"]),
        ],
        tasks=[make_task("T1")],
    )

    # --- Act ---
    findings = check_unknown_references(snap)

    # --- Assert ---
    assert [f.id for f in findings] == [
        "client-C1-unknown-task-T404",
        "client-C1-unknown-task-T405",
        "client-C2-unknown-task-T404",
    ]
    assert all(f.field == "RequestedTaskIDs" for f in findings)
    assert '"T404"' in findings[0].message


def test_reference_match_is_exact(make_client, make_task):
    snap = _snapshot([make_client(RequestedTaskIDs=["t1"])], tasks=[make_task("T1")])
    assert len(check_unknown_references(snap)) == 1


def test_known_references_are_clean(make_client, make_task):
    snap = _snapshot([make_client(RequestedTaskIDs=["T1", "T2"])], tasks=[make_task("T1"), make_task("T2")])
    assert check_unknown_references(snap) == []
