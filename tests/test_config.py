"""환경 설정 검증 테스트 — 출퇴근 횟수 상한, 시간대 이름."""

import pytest
from pydantic import ValidationError

from crewtime.config import Settings


class TestSettings:
    """Settings 필드 제약."""

    def test_defaults(self):
        s = Settings()
        assert s.MAX_TIME_ENTRIES_PER_ASSIGNMENT == 3
        assert s.TIMEZONE == "America/Los_Angeles"

    @pytest.mark.parametrize("limit", [1, 2, 3])
    def test_entry_limit_within_export_columns(self, limit):
        assert Settings(MAX_TIME_ENTRIES_PER_ASSIGNMENT=limit).MAX_TIME_ENTRIES_PER_ASSIGNMENT == limit

    @pytest.mark.parametrize("limit", [0, 4, 10])
    def test_entry_limit_out_of_range(self, limit):
        with pytest.raises(ValidationError):
            Settings(MAX_TIME_ENTRIES_PER_ASSIGNMENT=limit)

    def test_entry_limit_from_environment(self, monkeypatch):
        monkeypatch.setenv("MAX_TIME_ENTRIES_PER_ASSIGNMENT", "5")
        with pytest.raises(ValidationError):
            Settings()

    def test_unknown_timezone_rejected(self):
        with pytest.raises(ValidationError):
            Settings(TIMEZONE="Mars/Olympus_Mons")

    def test_timezone_accepted(self):
        assert Settings(TIMEZONE="Asia/Seoul").TIMEZONE == "Asia/Seoul"
