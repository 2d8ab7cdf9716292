from datetime import date, datetime, timezone

from condosync.schemas import Notification, Request
from condosync.sync import request_stats, unread_count, visible_to


def make_request(day, status="Pendente", sector="Ruas", kind="Elétrica"):
    return Request(
        id=f"r{day}",
        title="x",
        sector=sector,
        type=kind,
        status=status,
        author_id="u",
        author_name="U",
        created_at=datetime(2026, 3, day, 10),
    )


def test_request_stats_period_is_inclusive():
    requests = [
        make_request(1),
        make_request(5, status="Concluído", sector="Portaria"),
        make_request(10, kind="Hidráulica"),
        make_request(20),
    ]
    stats = request_stats(requests, date(2026, 3, 5), date(2026, 3, 10))
    assert stats["total"] == 2
    assert stats["by_status"] == {"Concluído": 1, "Pendente": 1}
    assert stats["by_sector"] == {"Portaria": 1, "Ruas": 1}
    assert stats["by_type"] == {"Elétrica": 1, "Hidráulica": 1}

    assert request_stats(requests)["total"] == 4


def test_unread_count_counts_broadcast_and_own():
    stamp = datetime(2026, 3, 10, 12)
    notifications = [
        Notification(id="1", message="geral", created_at=stamp),
        Notification(id="2", message="geral lida", created_at=stamp, read_by=["u1"]),
        Notification(id="3", message="minha", user_id="u1", created_at=stamp),
        Notification(id="4", message="de outro", user_id="u2", created_at=stamp),
    ]
    assert [n.id for n in visible_to(notifications, "u1")] == ["1", "2", "3"]
    assert unread_count(notifications, "u1") == 2
    assert unread_count(notifications, "u2") == 2
    assert unread_count([], "u1") == 0


def test_request_stats_counts_by_local_day():
    # 22h em São Paulo já é o dia seguinte em UTC
    late = make_request(5)
    late.created_at = datetime(2026, 3, 6, 1, tzinfo=timezone.utc)
    stats = request_stats([late], date(2026, 3, 5), date(2026, 3, 5), "America/Sao_Paulo")
    assert stats["total"] == 1
    assert request_stats([late], date(2026, 3, 6), None, "America/Sao_Paulo")["total"] == 0
