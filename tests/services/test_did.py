"""Tests for DidService — inspect, check, and candidate parsing."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from atdid.config.models import CheckConfig
from atdid.config.settings import AtdidSettings
from atdid.domain.did import Did, DidMethod
from atdid.services.did import (
    INVALID_DIDS,
    METHOD_NOT_ALLOWED,
    NO_INPUT,
    DidDescription,
    DidService,
    parse_candidates,
)


@pytest.fixture
def svc(settings: AtdidSettings) -> DidService:
    return DidService(settings)


def _service(**check: object) -> DidService:
    return DidService(AtdidSettings(check=CheckConfig.model_validate(check)))


class TestInspect:
    def test_web(self, svc: DidService) -> None:
        result = svc.inspect("did:web:localhost")
        assert result.ok
        assert result.op == "inspect_did"
        assert result.data == {
            "did": "did:web:localhost",
            "method": "web",
            "identifier": "localhost",
        }

    def test_plc(self, svc: DidService) -> None:
        result = svc.inspect("did:plc:z72i7hdynmk6r22z27h6tvur")
        assert result.ok
        assert result.data["method"] == "plc"
        assert result.data["identifier"] == "z72i7hdynmk6r22z27h6tvur"

    @pytest.mark.parametrize(
        "candidate,code,found",
        [
            ("did:web:", "TOO_SHORT", None),
            ("urn:web:localhost", "INVALID_PREFIX", "urn:"),
            ("did:key:zQ3shZc2Qz", "INVALID_METHOD", "key:"),
            ("did:web:abc:", "INVALID_IDENTIFIER", "abc:"),
        ],
    )
    def test_rejections(
        self, svc: DidService, candidate: str, code: str, found: str | None
    ) -> None:
        result = svc.inspect(candidate)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == code
        assert result.error.detail == {"candidate": candidate, "found": found}

    def test_error_message_is_human_readable(self, svc: DidService) -> None:
        result = svc.inspect("did:key:zQ3shZc2Qz")
        assert result.error is not None
        assert result.error.message == "Expected a method of either web or plc - found key:"

    def test_method_policy(self) -> None:
        result = _service(methods=["plc"]).inspect("did:web:localhost")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == METHOD_NOT_ALLOWED
        assert result.error.detail["found"] == "web"
        assert "allowed: plc" in result.error.message

    def test_methods_argument_overrides_config(self, svc: DidService) -> None:
        result = svc.inspect("did:plc:abc", methods=[DidMethod.WEB])
        assert result.error is not None
        assert result.error.code == METHOD_NOT_ALLOWED

    def test_unexpected_errors_propagate(self, svc: DidService) -> None:
        with pytest.raises(TypeError):
            svc.inspect(None)  # type: ignore[arg-type]


class TestCheck:
    def test_all_valid(self, svc: DidService) -> None:
        result = svc.check(["did:web:localhost", "did:plc:abc"])
        assert result.ok
        assert result.op == "check_dids"
        assert result.data["count"] == 2
        assert result.data["valid_count"] == 2
        assert result.data["invalid_count"] == 0
        assert [i["method"] for i in result.data["items"]] == ["web", "plc"]

    def test_some_invalid(self, svc: DidService) -> None:
        result = svc.check(["did:web:localhost", "did:web:bad#", "did:ion:abc"])
        assert not result.ok
        assert result.error is not None
        assert result.error.code == INVALID_DIDS
        assert result.error.message == "2 of 3 candidate(s) are not valid DIDs"
        detail = result.error.detail
        assert detail["valid_count"] == 1
        assert detail["invalid_count"] == 2
        codes = [i["code"] for i in detail["items"]]
        assert codes == [None, "INVALID_IDENTIFIER", "INVALID_METHOD"]

    def test_items_preserve_order_and_candidate(self, svc: DidService) -> None:
        candidates = ["did:web:b", "short", "did:web:a"]
        result = svc.check(candidates)
        assert result.error is not None
        assert [i["candidate"] for i in result.error.detail["items"]] == candidates

    def test_empty_input(self, svc: DidService) -> None:
        result = svc.check([])
        assert not result.ok
        assert result.error is not None
        assert result.error.code == NO_INPUT

    def test_accepts_generators(self, svc: DidService) -> None:
        result = svc.check(c for c in ["did:web:localhost"])
        assert result.ok

    def test_fail_fast_argument(self, svc: DidService) -> None:
        result = svc.check(["did:web:ok", "bad", "did:web:x", "did:web:y"], fail_fast=True)
        assert result.error is not None
        assert result.error.detail["count"] == 2
        assert result.warnings == ["Stopped at first invalid DID; 2 candidate(s) not checked"]

    def test_fail_fast_from_config(self) -> None:
        result = _service(fail_fast=True).check(["bad", "did:web:ok"])
        assert result.error is not None
        assert result.error.detail["count"] == 1

    def test_fail_fast_on_last_item_has_no_warning(self, svc: DidService) -> None:
        result = svc.check(["did:web:ok", "bad"], fail_fast=True)
        assert result.warnings == []

    def test_fail_fast_argument_false_overrides_config(self) -> None:
        result = _service(fail_fast=True).check(["bad", "did:web:ok"], fail_fast=False)
        assert result.error is not None
        assert result.error.detail["count"] == 2

    def test_method_policy(self) -> None:
        result = _service(methods=["web"]).check(["did:web:a.b", "did:plc:abc"])
        assert result.error is not None
        items = result.error.detail["items"]
        assert items[0]["valid"] is True
        assert items[1]["valid"] is False
        assert items[1]["code"] == METHOD_NOT_ALLOWED

    def test_deterministic(self, svc: DidService) -> None:
        a = svc.check(["did:web:ok", "nope!"])
        b = svc.check(["did:web:ok", "nope!"])
        assert a == b


class TestDidDescription:
    def test_holds_a_did(self) -> None:
        desc = DidDescription.of(Did.try_create("did:plc:abc"))
        assert isinstance(desc.did, Did)
        assert desc.method is DidMethod.PLC
        assert desc.model_dump(mode="json") == {
            "did": "did:plc:abc",
            "method": "plc",
            "identifier": "abc",
        }

    def test_validates_did_strings(self) -> None:
        desc = DidDescription.model_validate_json(
            '{"did": "did:web:localhost", "method": "web", "identifier": "localhost"}'
        )
        assert desc.did == Did.try_create("did:web:localhost")

    def test_rejects_invalid_did(self) -> None:
        with pytest.raises(ValidationError, match="method of either web or plc"):
            DidDescription.model_validate(
                {"did": "did:key:abc", "method": "web", "identifier": "abc"}
            )


class TestParseCandidates:
    def test_strips_whitespace(self) -> None:
        assert parse_candidates(["  did:web:a \n", "did:plc:b\n"]) == ["did:web:a", "did:plc:b"]

    def test_skips_comments_and_blanks(self) -> None:
        lines = ["# header\n", "\n", "did:web:a\n", "   \n", "#did:web:b\n"]
        assert parse_candidates(lines) == ["did:web:a"]

    def test_keeps_everything_when_not_ignoring(self) -> None:
        lines = ["# header\n", "\n", "did:web:a\n"]
        assert parse_candidates(lines, ignore_comments=False) == ["# header", "", "did:web:a"]


class TestReadCandidates:
    def test_reads_file(self, svc: DidService, tmp_path: Path) -> None:
        path = tmp_path / "dids.txt"
        path.write_text("# accounts\ndid:web:localhost\n\ndid:plc:abc\n", encoding="utf-8")
        assert svc.read_candidates(path) == ["did:web:localhost", "did:plc:abc"]

    def test_respects_ignore_comments_setting(self, tmp_path: Path) -> None:
        path = tmp_path / "dids.txt"
        path.write_text("# accounts\ndid:web:localhost\n", encoding="utf-8")
        svc = _service(ignore_comments=False)
        assert svc.read_candidates(path) == ["# accounts", "did:web:localhost"]
