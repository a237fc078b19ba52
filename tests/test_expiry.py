"""Tests for the expiry policy that drives certificate rotation."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from webhook_tls.domain.models import CertPemPair
from webhook_tls.domain.usages import RotationReason
from webhook_tls.tls.expiry import DEFAULT_RESERVE_WINDOW, ExpiryPolicy, should_rotate


class TestShouldRotate:
    """Tests for the boolean rotation predicate."""

    def test_missing_pair_rotates(self):
        assert should_rotate(None) is True

    def test_invalid_pem_rotates(self):
        pair = CertPemPair(certificate=b"not valid pem", private_key=b"")
        assert should_rotate(pair) is True

    def test_certificate_behind_another_block_rotates(self, make_pair, fixed_now):
        pair = make_pair(fixed_now + timedelta(days=300))
        bundled = CertPemPair(certificate=pair.private_key + pair.certificate, private_key=b"")

        assert should_rotate(bundled, now=fixed_now) is True

    def test_200_days_left_keeps_certificate(self, make_pair, fixed_now):
        pair = make_pair(fixed_now + timedelta(days=200))
        assert should_rotate(pair, now=fixed_now) is False

    def test_100_days_left_rotates(self, make_pair, fixed_now):
        pair = make_pair(fixed_now + timedelta(days=100))
        assert should_rotate(pair, now=fixed_now) is True

    @pytest.mark.parametrize("days_left,expected", [(179, True), (181, False)])
    def test_reserve_window_boundary(self, make_pair, fixed_now, days_left, expected):
        pair = make_pair(fixed_now + timedelta(days=days_left))
        assert should_rotate(pair, now=fixed_now) is expected

    def test_exactly_reserve_window_left_keeps_certificate(self, make_pair, fixed_now):
        """Rotation requires strictly less than the window."""
        pair = make_pair(fixed_now + DEFAULT_RESERVE_WINDOW)
        assert should_rotate(pair, now=fixed_now) is False

    def test_expired_certificate_rotates(self, make_pair, fixed_now):
        pair = make_pair(fixed_now - timedelta(days=1))
        assert should_rotate(pair, now=fixed_now) is True

    def test_custom_reserve_window(self, make_pair, fixed_now):
        pair = make_pair(fixed_now + timedelta(days=100))
        assert should_rotate(pair, now=fixed_now, reserve_window=timedelta(days=30)) is False

    def test_naive_now_is_treated_as_utc(self, make_pair, fixed_now):
        pair = make_pair(fixed_now + timedelta(days=200))
        assert should_rotate(pair, now=fixed_now.replace(tzinfo=None)) is False

    def test_defaults_to_current_time(self, make_pair):
        pair = make_pair(datetime.now(timezone.utc) + timedelta(days=365))
        assert should_rotate(pair) is False


class TestExpiryPolicy:
    """Tests for ExpiryPolicy decisions."""

    def test_default_reserve_window_is_180_days(self):
        assert ExpiryPolicy().reserve_window == timedelta(days=180)

    def test_negative_reserve_window_rejected(self):
        with pytest.raises(ValueError, match="reserve_window"):
            ExpiryPolicy(reserve_window=timedelta(days=-1))

    def test_missing_pair_reason(self):
        decision = ExpiryPolicy().evaluate(None)

        assert decision.rotate is True
        assert decision.reason == RotationReason.NOT_PROVISIONED
        assert decision.not_after is None

    def test_unreadable_certificate_is_absorbed_and_logged(self, caplog):
        pair = CertPemPair(certificate=b"-----BEGIN CERTIFICATE-----\n!!\n", private_key=b"")

        with caplog.at_level("WARNING", logger="webhook_tls.tls.expiry"):
            decision = ExpiryPolicy().evaluate(pair)

        assert decision.rotate is True
        assert decision.reason == RotationReason.UNREADABLE
        assert "certificate_unreadable" in caplog.text

    def test_valid_decision_carries_expiry(self, make_pair, fixed_now):
        not_after = fixed_now + timedelta(days=300)
        decision = ExpiryPolicy().evaluate(make_pair(not_after), now=fixed_now)

        assert decision.rotate is False
        assert decision.reason == RotationReason.VALID
        assert decision.not_after == not_after
        assert decision.remaining == timedelta(days=300)

    def test_within_window_reason(self, make_pair, fixed_now):
        decision = ExpiryPolicy().evaluate(make_pair(fixed_now + timedelta(days=10)), now=fixed_now)

        assert decision.rotate is True
        assert decision.reason == RotationReason.WITHIN_RESERVE_WINDOW
        assert decision.remaining == timedelta(days=10)

    def test_overridden_window_moves_boundary(self, make_pair, fixed_now):
        policy = ExpiryPolicy(reserve_window=timedelta(days=7))
        pair = make_pair(fixed_now + timedelta(days=7))

        assert policy.should_rotate(pair, now=fixed_now) is False
        assert policy.should_rotate(pair, now=fixed_now + timedelta(seconds=1)) is True

    def test_records_metric(self):
        with patch("webhook_tls.tls.expiry.webhook_tls_metrics") as mock_metrics:
            ExpiryPolicy().evaluate(None)

        mock_metrics.record_rotation_decision.assert_called_once_with("not_provisioned", True)
