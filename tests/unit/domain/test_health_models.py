"""헬스/서비스 도메인 모델 단위 테스트."""

import pytest
from pydantic import ValidationError

from trust_fabric.domain.enums import PollStatus, ReadinessStatus
from trust_fabric.domain.errors import ReadinessCancelled, ReadinessFailed
from trust_fabric.domain.health import PollOutcome, ReadinessReport, SmokeDatatype
from trust_fabric.domain.services import (
    DATA_EXCHANGE,
    DEV_SERVICES,
    DEV_STAGES,
    FIREFLY_ORG1,
    FIREFLY_REG,
    SERVICE_CATALOG,
    ResolvedEndpoint,
    ServiceDescriptor,
)


def _outcome(service: str, status: PollStatus, elapsed: float = 0, **kwargs) -> PollOutcome:
    return PollOutcome(service=service, status=status, elapsed_seconds=elapsed, attempts=1, **kwargs)


class TestCatalog:
    def test_org1_required_with_write_smoke(self):
        assert FIREFLY_ORG1.required is True
        assert FIREFLY_ORG1.default_port == 5000
        assert FIREFLY_ORG1.smoke_path == "/api/v1/datatypes"

    def test_regulator_optional(self):
        assert FIREFLY_REG.required is False
        assert FIREFLY_REG.default_port == 5100

    def test_dx_https_without_verification(self):
        assert DATA_EXCHANGE.protocol == "https"
        assert DATA_EXCHANGE.verify_tls is False

    def test_catalog_keys_match_identifiers(self):
        assert all(key == d.identifier for key, d in SERVICE_CATALOG.items())

    def test_dev_stages_cover_dev_services(self):
        assert DEV_STAGES[0] == ("dx",)
        assert {s for stage in DEV_STAGES for s in stage} == set(DEV_SERVICES)

    def test_descriptor_is_frozen(self):
        with pytest.raises(ValidationError):
            FIREFLY_ORG1.required = False

    @pytest.mark.parametrize("identifier", ["Org1", "1org", "org-1", ""])
    def test_invalid_identifier(self, identifier):
        with pytest.raises(ValidationError):
            ServiceDescriptor(identifier=identifier, display_name="x", port_env="X", default_port=1)

    def test_invalid_default_port(self):
        with pytest.raises(ValidationError):
            ServiceDescriptor(identifier="x", display_name="x", port_env="X", default_port=70000)

    def test_endpoint_url_join(self):
        endpoint = ResolvedEndpoint(service="org1", base_url="http://localhost:5000/")
        assert endpoint.url("/api/v1/status") == "http://localhost:5000/api/v1/status"
        assert endpoint.url("status") == "http://localhost:5000/status"


class TestPollOutcome:
    def test_describe_with_status_code(self):
        outcome = PollOutcome(
            service="reg", status=PollStatus.TIMED_OUT, elapsed_seconds=120, attempts=61, last_status_code=502
        )
        assert outcome.describe() == "TIMED_OUT after 120.0s (61 attempts, last: HTTP 502)"

    def test_describe_without_response(self):
        outcome = PollOutcome(service="reg", status=PollStatus.CANCELLED, elapsed_seconds=0, attempts=0)
        assert "no response" in outcome.describe()

    def test_negative_elapsed_rejected(self):
        with pytest.raises(ValidationError):
            PollOutcome(service="reg", status=PollStatus.READY, elapsed_seconds=-1, attempts=1)


class TestReadinessReport:
    def test_duplicate_record_rejected(self):
        report = ReadinessReport()
        report.record(_outcome("org1", PollStatus.READY))
        with pytest.raises(RuntimeError):
            report.record(_outcome("org1", PollStatus.READY))

    def test_overall_unset_until_finalize(self):
        report = ReadinessReport(required=frozenset({"org1"}))
        report.record(_outcome("org1", PollStatus.READY))
        assert report.overall is None
        assert report.finalize() == ReadinessStatus.ALL_READY

    @pytest.mark.parametrize(
        "org1, reg, expected",
        [
            (PollStatus.READY, PollStatus.READY, ReadinessStatus.ALL_READY),
            (PollStatus.READY, PollStatus.TIMED_OUT, ReadinessStatus.DEGRADED_READY),
            (PollStatus.READY, PollStatus.CANCELLED, ReadinessStatus.DEGRADED_READY),
            (PollStatus.TIMED_OUT, PollStatus.READY, ReadinessStatus.FAILED),
            (PollStatus.TIMED_OUT, PollStatus.TIMED_OUT, ReadinessStatus.FAILED),
            (PollStatus.CANCELLED, PollStatus.READY, ReadinessStatus.CANCELLED),
        ],
    )
    def test_policy(self, org1, reg, expected):
        report = ReadinessReport(required=frozenset({"org1"}))
        report.record(_outcome("org1", org1))
        report.record(_outcome("reg", reg))
        assert report.finalize() == expected

    def test_raise_for_status_failed(self):
        report = ReadinessReport(required=frozenset({"org1"}))
        report.record(_outcome("reg", PollStatus.TIMED_OUT, elapsed=120))
        report.record(_outcome("org1", PollStatus.TIMED_OUT, elapsed=120, last_status_code=503))

        with pytest.raises(ReadinessFailed) as exc_info:
            report.raise_for_status()

        err = exc_info.value
        assert err.service == "org1"
        assert err.report is report
        assert [o.service for o in err.supplementary] == ["reg"]
        assert "HTTP 503" in str(err)

    def test_raise_for_status_cancelled(self):
        report = ReadinessReport(required=frozenset({"org1"}))
        report.record(_outcome("org1", PollStatus.CANCELLED))
        with pytest.raises(ReadinessCancelled) as exc_info:
            report.raise_for_status()
        assert exc_info.value.report is report

    def test_raise_for_status_degraded_is_silent(self):
        report = ReadinessReport(required=frozenset({"org1"}))
        report.record(_outcome("org1", PollStatus.READY))
        report.record(_outcome("reg", PollStatus.TIMED_OUT))
        report.raise_for_status()
        assert report.overall == ReadinessStatus.DEGRADED_READY


class TestSmokeDatatype:
    def test_semver_required(self):
        with pytest.raises(ValidationError):
            SmokeDatatype(name="smoke", version="v1")

    def test_default_validator(self):
        assert SmokeDatatype(name="smoke", version="1.0.0").validator.name == "json"
