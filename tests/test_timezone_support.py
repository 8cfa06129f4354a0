"""Test timezone support: naive UTC storage and Manila business days."""

from datetime import date, datetime, timezone

from breadpos.utils.datetime import APP_TIMEZONE, compact_date, date_key, now_local, now_utc, today_key


class TestDatetimeUtilities:
    def test_now_utc_is_naive_utc(self):
        dt = now_utc()

        assert dt.tzinfo is None, "now_utc() is stored without tzinfo"
        assert abs((datetime.now(timezone.utc).replace(tzinfo=None) - dt).total_seconds()) < 1

    def test_now_local_is_manila(self):
        dt = now_local()

        assert dt.tzinfo == APP_TIMEZONE
        # Philippines has no DST
        assert dt.utcoffset().total_seconds() == 8 * 3600

    def test_today_key_follows_local_date(self):
        assert today_key() == now_local().strftime("%Y-%m-%d")

    def test_key_formats(self):
        assert date_key(date(2025, 3, 1)) == "2025-03-01"
        assert compact_date(date(2025, 3, 1)) == "20250301"
