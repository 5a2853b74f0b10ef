import datetime
import pytest
from zerolist.core import stats
from zerolist.core.exceptions import ValidationError
from zerolist.core.stats import Period, percent_change, rate
from zerolist.core.utils import utcnow


def at(day, hour=12, month=1, year=2025):
    return datetime.datetime(year, month, day, hour, 0)

@pytest.fixture
def january():
    return Period.parse("2025-01-01", "2025-01-10")


@pytest.mark.parametrize("current,previous,expected", [
    (0, 0, 0),
    (5, 0, 100),
    (0, 5, -100),
    (15, 10, 50),
    (10, 15, -33),
    (1, 3, -67),
])
def test_percent_change(current, previous, expected):
    assert percent_change(current, previous) == expected

def test_rate():
    assert rate(0, 0) == 0
    assert rate(1, 3) == 33
    assert rate(2, 3) == 67
    assert rate(1, 8) == 13


class TestPeriod:

    def test_defaults_to_trailing_thirty_days(self):
        period = Period.parse(today=datetime.date(2025, 3, 31))
        assert period.first == datetime.date(2025, 3, 1)
        assert period.last == datetime.date(2025, 3, 31)
        assert period.days == 31

    def test_default_from_is_relative_to_explicit_to(self):
        assert Period.parse(to="2025-01-31").first == datetime.date(2025, 1, 1)

    def test_bounds(self, january):
        assert january.start == datetime.datetime(2025, 1, 1)
        assert january.end == datetime.datetime(2025, 1, 11)
        assert january.to_dict() == {
            "from": "2025-01-01T00:00:00.000Z",
            "to": "2025-01-10T23:59:59.999Z",
        }

    def test_previous_has_same_length_and_ends_before(self, january):
        previous = january.previous()
        assert previous.first == datetime.date(2024, 12, 22)
        assert previous.last == datetime.date(2024, 12, 31)
        assert previous.days == january.days

    @pytest.mark.parametrize("from_,to", [
        ("2025-02-30", "2025-03-01"),
        ("yesterday", None),
        ("2025-01-10", "2025-01-01"),
        ("9999-12-30", "9999-12-31"),
        (None, "0001-01-05"),
        ("2015-01-01", "2025-01-01"),
    ])
    def test_invalid_ranges(self, from_, to):
        with pytest.raises(ValidationError):
            Period.parse(from_, to)

    def test_longest_range(self):
        period = Period.parse("2020-01-01", "2024-12-31")
        assert period.days == 1827
        assert len(list(period.dates())) == 1827

    def test_no_previous_period_before_year_one(self):
        period = Period.parse("0001-01-01", "0001-01-05")
        with pytest.raises(ValidationError):
            period.previous()

    def test_single_day(self):
        period = Period.parse("2025-01-05", "2025-01-05")
        assert list(period.dates()) == ["2025-01-05"]


class TestWaitlistStats:

    def test_daily_series_is_zero_filled(self, make_waitlist, add_signup, january):
        waitlist = make_waitlist()
        add_signup(waitlist, "a@example.com", created_at=at(3, hour=10))
        add_signup(waitlist, "b@example.com", status="pending", created_at=at(7, hour=23))

        daily = stats.waitlist_stats(waitlist, january)["dailySignups"]
        assert len(daily) == 10
        assert [d["date"] for d in daily] == [f"2025-01-{d:02d}" for d in range(1, 11)]
        assert sum(1 for d in daily if d["count"] == 0 and d["confirmed"] == 0) == 8
        assert daily[2] == {"date": "2025-01-03", "count": 1, "confirmed": 1}
        assert daily[6] == {"date": "2025-01-07", "count": 1, "confirmed": 0}

    def test_window_edges(self, make_waitlist, add_signup, january):
        waitlist = make_waitlist()
        add_signup(waitlist, "first@example.com", created_at=datetime.datetime(2025, 1, 1, 0, 0))
        add_signup(waitlist, "last@example.com", created_at=datetime.datetime(2025, 1, 10, 23, 59, 59))
        add_signup(waitlist, "after@example.com", created_at=datetime.datetime(2025, 1, 11, 0, 0))
        add_signup(waitlist, "before@example.com", created_at=datetime.datetime(2024, 12, 31, 23, 59))
        counts = stats.waitlist_stats(waitlist, january)["counts"]
        assert counts["current"]["total"] == 2
        assert counts["allTime"]["total"] == 4

    def test_counts_and_changes(self, make_waitlist, add_signup, january):
        waitlist = make_waitlist()
        add_signup(waitlist, "a@example.com", status="confirmed", created_at=at(2))
        add_signup(waitlist, "b@example.com", status="invited", created_at=at(3))
        add_signup(waitlist, "c@example.com", status="pending", created_at=at(4))
        add_signup(waitlist, "d@example.com", status="pending", created_at=at(4))
        add_signup(waitlist, "old@example.com", status="confirmed", created_at=at(25, month=12, year=2024))
        add_signup(waitlist, "older@example.com", status="pending", created_at=at(1, month=6, year=2024))

        result = stats.waitlist_stats(waitlist, january, compare=True)
        counts = result["counts"]
        assert counts["current"] == {"total": 4, "pending": 2, "confirmed": 1, "invited": 1}
        assert counts["previous"] == {"total": 1, "pending": 0, "confirmed": 1, "invited": 0}
        assert counts["allTime"] == {"total": 6, "pending": 3, "confirmed": 2, "invited": 1}
        assert counts["change"] == {"total": 300, "confirmed": 100}
        assert result["confirmationRate"] == {"current": 50, "previous": 100, "change": -50}
        assert result["period"]["from"] == "2025-01-01T00:00:00.000Z"

    def test_without_compare_previous_is_empty(self, make_waitlist, add_signup, january):
        waitlist = make_waitlist()
        add_signup(waitlist, "a@example.com", created_at=at(2))
        add_signup(waitlist, "old@example.com", created_at=at(25, month=12, year=2024))
        counts = stats.waitlist_stats(waitlist, january)["counts"]
        assert counts["previous"]["total"] == 0
        assert counts["change"]["total"] == 100

    def test_empty_waitlist_is_all_zero(self, make_waitlist, january):
        result = stats.waitlist_stats(make_waitlist(), january, compare=True)
        assert result["counts"]["change"] == {"total": 0, "confirmed": 0}
        assert result["confirmationRate"] == {"current": 0, "previous": 0, "change": 0}
        assert result["hourlyDistribution"] == []
        assert result["sources"] == []
        assert result["todaySignups"] == 0

    def test_hourly_distribution(self, make_waitlist, add_signup, january):
        waitlist = make_waitlist()
        add_signup(waitlist, "a@example.com", created_at=at(2, hour=10))
        add_signup(waitlist, "b@example.com", created_at=at(3, hour=10))
        add_signup(waitlist, "c@example.com", created_at=at(3, hour=23))
        assert stats.waitlist_stats(waitlist, january)["hourlyDistribution"] == [
            {"hour": 10, "count": 2},
            {"hour": 23, "count": 1},
        ]

    def test_sources(self, make_waitlist, add_signup, january):
        waitlist = make_waitlist()
        add_signup(waitlist, "a@example.com", referral_source="twitter", created_at=at(2))
        add_signup(waitlist, "b@example.com", status="pending", referral_source="twitter", created_at=at(2))
        add_signup(waitlist, "c@example.com", created_at=at(3))
        assert stats.waitlist_stats(waitlist, january)["sources"] == [
            {"source": "twitter", "count": 2, "confirmed": 1, "rate": 50},
            {"source": "direct", "count": 1, "confirmed": 1, "rate": 100},
        ]

    def test_today(self, make_waitlist, add_signup, january):
        waitlist = make_waitlist()
        add_signup(waitlist, "now@example.com", created_at=utcnow())
        add_signup(waitlist, "old@example.com", created_at=utcnow() - datetime.timedelta(days=3))
        assert stats.waitlist_stats(waitlist, january)["todaySignups"] == 1

    def test_other_waitlists_are_excluded(self, make_waitlist, add_signup, january):
        beta = make_waitlist(name="Beta")
        gamma = make_waitlist(name="Gamma")
        add_signup(beta, "a@example.com", created_at=at(2))
        add_signup(gamma, "a@example.com", created_at=at(2))
        assert stats.waitlist_stats(beta, january)["counts"]["current"]["total"] == 1


class TestDashboard:

    def test_overview(self, make_waitlist, add_signup, january):
        beta = make_waitlist(name="Beta")
        gamma = make_waitlist(name="Gamma")
        add_signup(beta, "a@example.com", created_at=at(2))
        add_signup(gamma, "b@example.com", status="pending", created_at=at(3))
        add_signup(gamma, "c@example.com", created_at=at(28, month=12, year=2024))

        result = stats.dashboard_stats(january, compare=True)
        overview = result["overview"]
        assert overview["waitlists"] == 2
        assert overview["signups"] == {"current": 2, "previous": 1, "allTime": 3, "change": 100}
        assert overview["confirmed"] == {"current": 1, "previous": 1, "allTime": 2, "change": 0}
        assert overview["confirmationRate"] == {"current": 50, "previous": 100, "change": -50}
        assert len(result["dailySignups"]) == 10

    def test_top_waitlists_order(self, make_waitlist, add_signup, january):
        created = datetime.datetime(2024, 1, 1)
        lists = []
        for i, name in enumerate(["Alpha", "Bravo", "Charlie"]):
            waitlist = make_waitlist(name=name)
            waitlist.update(created_at=created + datetime.timedelta(days=i))
            lists.append(waitlist)
        alpha, bravo, charlie = lists
        for n, waitlist in ((2, alpha), (2, bravo), (3, charlie)):
            for i in range(n):
                add_signup(waitlist, f"user{i}@example.com", created_at=at(2 + i))
        add_signup(alpha, "pending@example.com", status="pending", created_at=at(20, month=2))

        top = stats.dashboard_stats(january)["topWaitlists"]
        assert [w["slug"] for w in top] == ["charlie", "alpha", "bravo"]
        assert top[0]["signups"] == 3
        assert top[0]["rate"] == 100
        assert top[0]["primaryColor"] == "#6366f1"

    def test_top_waitlists_is_capped_at_five(self, make_waitlist, january):
        for i in range(6):
            make_waitlist(name=f"List {i}")
        top = stats.dashboard_stats(january)["topWaitlists"]
        assert len(top) == 5
        assert all(w["signups"] == 0 and w["rate"] == 0 for w in top)

    def test_sources_are_capped_at_ten(self, make_waitlist, add_signup, january):
        waitlist = make_waitlist()
        for i in range(12):
            add_signup(waitlist, f"user{i}@example.com", referral_source=f"source-{i}", created_at=at(2))
        assert len(stats.dashboard_stats(january)["sources"]) == 10


class TestStatsRoutes:

    def test_waitlist_stats(self, client, make_waitlist, add_signup):
        waitlist = make_waitlist()
        add_signup(waitlist, "a@example.com", created_at=at(3))
        r = client.get(f"/api/admin/waitlists/{waitlist.id}/stats",
                       params={"from": "2025-01-01", "to": "2025-01-10", "compare": "true"})
        assert r.status_code == 200
        body = r.json()
        assert body["counts"]["current"]["total"] == 1
        assert len(body["dailySignups"]) == 10

    def test_invalid_range(self, client, make_waitlist):
        waitlist = make_waitlist()
        r = client.get(f"/api/admin/waitlists/{waitlist.id}/stats",
                       params={"from": "2025-01-10", "to": "2025-01-01"})
        assert r.status_code == 400
        assert r.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.parametrize("params", [
        {"from": "9999-12-30", "to": "9999-12-31"},
        {"from": "0001-01-01", "to": "0001-01-05", "compare": "true"},
    ])
    def test_calendar_edges(self, client, make_waitlist, params):
        waitlist = make_waitlist()
        for url in (f"/api/admin/waitlists/{waitlist.id}/stats", "/api/admin/stats"):
            r = client.get(url, params=params)
            assert r.status_code == 400
            assert r.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_unknown_waitlist(self, client):
        r = client.get("/api/admin/waitlists/nope/stats")
        assert r.json()["error"]["code"] == "WAITLIST_NOT_FOUND"

    def test_dashboard(self, client, make_waitlist):
        make_waitlist()
        r = client.get("/api/admin/stats")
        assert r.status_code == 200
        body = r.json()
        assert body["overview"]["waitlists"] == 1
        assert len(body["dailySignups"]) == 31
