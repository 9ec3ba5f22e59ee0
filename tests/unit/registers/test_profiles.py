"""Tests for device profiles and control domain layouts."""

from __future__ import annotations

import pytest

from pygrowattspf.constants.scaling import ScaleFactor
from pygrowattspf.exceptions import UnknownDomainError
from pygrowattspf.registers.fields import FieldKind, FieldRule, RegisterSpace, contiguous_blocks
from pygrowattspf.registers.profiles import (
    EXTENDED_PROFILE,
    PACKED_PROFILE,
    PROFILES,
    SCALED_PROFILE,
    TOU_CHARGING,
    TOU_DISCHARGING,
    ControlDomain,
    DeviceProfile,
    ProfileName,
    get_profile,
)
from pygrowattspf.validation import find_violations


class TestProfileLookup:
    """Tests for profile selection."""

    def test_all_profiles_registered(self) -> None:
        """Every ProfileName has a profile."""
        assert set(PROFILES) == set(ProfileName)

    @pytest.mark.parametrize("name", ["packed", "scaled", "extended"])
    def test_get_profile_by_string(self, name: str) -> None:
        """Profiles are selectable by their configuration string."""
        assert get_profile(name).name == name

    def test_get_profile_unknown(self) -> None:
        """Unknown names raise ValueError."""
        with pytest.raises(ValueError):
            get_profile("hybrid")

    def test_unknown_domain(self) -> None:
        """Asking for an undeclared domain raises UnknownDomainError."""
        with pytest.raises(UnknownDomainError):
            PACKED_PROFILE.domain("batteryLimits")


@pytest.mark.parametrize("profile", list(PROFILES.values()), ids=lambda p: p.name)
class TestProfileInvariants:
    """Invariants every shipped profile must hold."""

    def test_has_both_tou_domains(self, profile: DeviceProfile) -> None:
        """Charging and discharging domains are declared."""
        assert profile.domain_names == (TOU_CHARGING, TOU_DISCHARGING)

    def test_defaults_are_valid(self, profile: DeviceProfile) -> None:
        """Seed values pass validation."""
        for domain in profile.domains:
            assert find_violations(domain, domain.defaults) == []

    def test_control_fields_are_holding(self, profile: DeviceProfile) -> None:
        """Control fields are writable holding registers."""
        for domain in profile.domains:
            assert all(rule.space is RegisterSpace.HOLDING for rule in domain.fields)

    def test_domains_do_not_overlap(self, profile: DeviceProfile) -> None:
        """No register belongs to two domains."""
        charging, discharging = (
            {a for rule in d.fields for a in rule.addresses} for d in profile.domains
        )
        assert charging.isdisjoint(discharging)

    def test_domains_stay_clear_of_clock(self, profile: DeviceProfile) -> None:
        """Control domains never write the clock registers."""
        clock = {rule.address for rule in profile.clock}
        for domain in profile.domains:
            assert clock.isdisjoint(a for rule in domain.fields for a in rule.addresses)

    def test_sensor_groups_cover_sensors(self, profile: DeviceProfile) -> None:
        """Every sensor field lies inside one read group."""
        for rule in profile.sensors:
            assert any(
                start <= rule.address and rule.end <= start + count
                for start, count in profile.sensor_groups
            )


class TestPackedProfile:
    """Tests for the 16-bit packed layout."""

    def test_time_fields_share_word(self) -> None:
        """startHour1 and startMinute1 are packed into one register."""
        domain = PACKED_PROFILE.domain(TOU_CHARGING)
        hour, minute = domain.rule("startHour1"), domain.rule("startMinute1")
        assert hour.address == minute.address == 37
        assert hour.kind is FieldKind.HIGH_BYTE
        assert minute.kind is FieldKind.LOW_BYTE

    def test_blocks(self) -> None:
        """Each domain is one contiguous block."""
        assert PACKED_PROFILE.domain(TOU_CHARGING).blocks == [(34, 6)]
        assert PACKED_PROFILE.domain(TOU_DISCHARGING).blocks == [(40, 5)]


class TestScaledProfile:
    """Tests for the 0.1-unit layout."""

    def test_percentages_are_scaled(self) -> None:
        """Percent fields use scale 10."""
        domain = SCALED_PROFILE.domain(TOU_CHARGING)
        assert domain.rule("stopSOC").scale is ScaleFactor.SCALE_10
        assert domain.rule("chargePower").scale is ScaleFactor.SCALE_10

    def test_time_fields_are_separate_words(self) -> None:
        """Hour and minute each get their own register."""
        domain = SCALED_PROFILE.domain(TOU_CHARGING)
        assert domain.rule("startHour1").address == 93
        assert domain.rule("startMinute1").address == 94
        assert not domain.rule("startHour1").is_packed

    def test_discharge_stop_soc_floor(self) -> None:
        """dischargeStopSOC refuses values below 10 on this layout."""
        assert SCALED_PROFILE.domain(TOU_DISCHARGING).rule("dischargeStopSOC").minimum == 10


class TestExtendedProfile:
    """Tests for the three-window layout."""

    def test_addresses_above_1000(self) -> None:
        """Every control register lives in the 1070+ bank."""
        for domain in EXTENDED_PROFILE.domains:
            assert all(rule.address >= 1000 for rule in domain.fields)

    def test_three_windows_per_domain(self) -> None:
        """Each domain has three enable flags."""
        for domain in EXTENDED_PROFILE.domains:
            assert {f"enablePeriod{n}" for n in (1, 2, 3)} <= set(domain.field_names)

    def test_blocks(self) -> None:
        """Settings and windows are written as separate blocks."""
        assert EXTENDED_PROFILE.domain(TOU_DISCHARGING).blocks == [(1070, 2), (1080, 9)]
        assert EXTENDED_PROFILE.domain(TOU_CHARGING).blocks == [(1090, 3), (1100, 9)]

    def test_window_layout(self) -> None:
        """Window 2 of the charging schedule starts at 1103."""
        domain = EXTENDED_PROFILE.domain(TOU_CHARGING)
        assert domain.rule("startHour2").address == 1103
        assert domain.rule("stopMinute2").address == 1104
        assert domain.rule("enablePeriod2").address == 1105

    def test_window_boundaries_packed(self) -> None:
        """Hour and minute of each boundary share one register."""
        for domain in EXTENDED_PROFILE.domains:
            for n in (1, 2, 3):
                hour = domain.rule(f"startHour{n}")
                minute = domain.rule(f"startMinute{n}")
                assert hour.is_packed and minute.is_packed
                assert hour.address == minute.address
                assert hour.partner == minute.name


class TestControlDomainConstruction:
    """Tests for ControlDomain invariant checks."""

    def _rule(self, name: str, address: int, **kwargs: object) -> FieldRule:
        return FieldRule(name=name, space=RegisterSpace.HOLDING, address=address, **kwargs)  # type: ignore[arg-type]

    def test_rejects_missing_default(self) -> None:
        """Every field needs a default."""
        with pytest.raises(ValueError, match="no default"):
            ControlDomain(name="d", fields=(self._rule("a", 1),), defaults={})

    def test_rejects_input_fields(self) -> None:
        """Input registers cannot be control fields."""
        rule = FieldRule(name="a", space=RegisterSpace.INPUT, address=1)
        with pytest.raises(ValueError, match="must be holding"):
            ControlDomain(name="d", fields=(rule,), defaults={"a": 0})

    def test_rejects_aliasing(self) -> None:
        """Two unpacked fields may not share a register."""
        with pytest.raises(ValueError, match="aliases"):
            ControlDomain(
                name="d",
                fields=(self._rule("a", 1), self._rule("b", 1)),
                defaults={"a": 0, "b": 0},
            )

    def test_rejects_unpaired_packed_field(self) -> None:
        """A packed field's partner must exist and point back."""
        hour = self._rule("h", 1, kind=FieldKind.HIGH_BYTE, partner="m")
        with pytest.raises(ValueError, match="invalid packed partner"):
            ControlDomain(name="d", fields=(hour,), defaults={"h": 0})


class TestContiguousBlocks:
    """Tests for grouping addresses into write blocks."""

    def test_groups_runs(self) -> None:
        """Consecutive addresses merge, gaps split."""
        assert contiguous_blocks({1, 2, 3, 7, 8, 10}) == [(1, 3), (7, 2), (10, 1)]

    def test_empty(self) -> None:
        assert contiguous_blocks(set()) == []
