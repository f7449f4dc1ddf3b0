"""Tests for calendar attendee classification and permission checks."""

import pytest

from workspace_gate.permissions.calendar import (
    DEFAULT_PERMISSIONS,
    AttendeeCondition,
    OperationType,
    PermissionAction,
    check_permission,
    classify_attendees,
    default_permission_config,
    deny_message,
    load_permission_config,
    parse_permission_config,
)

SELF = "me@example.com"


class TestClassifyAttendees:
    """Tests for classify_attendees."""

    def test_no_attendees_is_self_only(self):
        """Test an event with nobody else is self-only."""
        assert classify_attendees([], SELF, "example.com") is AttendeeCondition.SELF_ONLY

    def test_only_self_is_self_only(self):
        """Test listing only yourself is self-only."""
        assert classify_attendees([SELF, SELF], SELF, "") is AttendeeCondition.SELF_ONLY

    def test_self_comparison_is_case_insensitive(self):
        """Test self matching ignores case."""
        assert (
            classify_attendees(["A@Example.com"], "a@example.com", "")
            is AttendeeCondition.SELF_ONLY
        )

    def test_same_domain_is_internal(self):
        """Test colleagues in the internal domain are internal."""
        attendees = [SELF, "bob@example.com", "carol@example.com"]
        assert classify_attendees(attendees, SELF, "example.com") is AttendeeCondition.INTERNAL

    def test_domain_comparison_is_case_insensitive(self):
        """Test domain matching ignores case on both sides."""
        assert (
            classify_attendees(["Bob@EXAMPLE.com"], SELF, "Example.COM")
            is AttendeeCondition.INTERNAL
        )

    def test_any_outsider_is_external(self):
        """Test one outside address makes the event external."""
        attendees = ["bob@example.com", "eve@other.org"]
        assert classify_attendees(attendees, SELF, "example.com") is AttendeeCondition.EXTERNAL

    @pytest.mark.parametrize(
        "attendees",
        [["bob@example.com"], ["bob@example.com", "carol@example.com"], ["x@y.z"]],
    )
    def test_empty_internal_domain_never_internal(self, attendees):
        """Test that without an internal domain anyone else is external."""
        assert classify_attendees(attendees, SELF, "") is AttendeeCondition.EXTERNAL

    def test_subdomain_is_not_internal(self):
        """Test the domain must match exactly after the @."""
        assert (
            classify_attendees(["bob@sub.example.com"], SELF, "example.com")
            is AttendeeCondition.EXTERNAL
        )

    def test_suffix_lookalike_is_not_internal(self):
        """Test a domain that merely ends with the internal domain is external."""
        assert (
            classify_attendees(["bob@notexample.com"], SELF, "example.com")
            is AttendeeCondition.EXTERNAL
        )

    def test_leading_at_in_domain_is_tolerated(self):
        """Test '@example.com' works the same as 'example.com'."""
        assert (
            classify_attendees(["bob@example.com"], SELF, "@example.com")
            is AttendeeCondition.INTERNAL
        )


class TestDefaultPolicy:
    """Tests for the restrictive default policy."""

    @pytest.mark.parametrize("condition", list(AttendeeCondition))
    def test_read_always_allowed(self, condition):
        """Test reading is allowed for every tier."""
        assert DEFAULT_PERMISSIONS[OperationType.READ].action_for(condition) is PermissionAction.ALLOW

    @pytest.mark.parametrize("condition", list(AttendeeCondition))
    def test_delete_always_denied(self, condition):
        """Test deleting is denied for every tier."""
        assert DEFAULT_PERMISSIONS[OperationType.DELETE].action_for(condition) is PermissionAction.DENY

    @pytest.mark.parametrize("operation", [OperationType.CREATE, OperationType.UPDATE])
    def test_create_update_self_only(self, operation):
        """Test create/update are allowed only for self-only events."""
        table = DEFAULT_PERMISSIONS[operation]
        assert table.self_only is PermissionAction.ALLOW
        assert table.internal is PermissionAction.DENY
        assert table.external is PermissionAction.DENY


class TestLoadPermissionConfig:
    """Tests for loading the calendar policy."""

    def test_no_config_path_gives_default(self):
        """Test an unconfigured policy is the restrictive default."""
        assert load_permission_config(None) == default_permission_config()

    def test_missing_file_gives_default(self, temp_dir):
        """Test a missing file is the restrictive default."""
        assert load_permission_config(temp_dir / "absent.json") == default_permission_config()

    def test_missing_section_gives_default(self, policy_file):
        """Test a file without a calendar section is the restrictive default."""
        path = policy_file({"docs": {"allowedDocuments": []}})
        assert load_permission_config(path) == default_permission_config()

    def test_malformed_file_gives_default(self, temp_dir):
        """Test unparseable content is the restrictive default."""
        path = temp_dir / "policy.json"
        path.write_text("{oops")
        assert load_permission_config(path) == default_permission_config()

    def test_full_section(self, policy_file):
        """Test a complete calendar section is used as written."""
        path = policy_file(
            {
                "calendar": {
                    "internalDomain": "example.com",
                    "permissions": {
                        "delete": {"self_only": "allow", "internal": "deny", "external": "deny"}
                    },
                }
            }
        )
        config = load_permission_config(path)
        assert config.internal_domain == "example.com"
        assert config.permissions[OperationType.DELETE].self_only is PermissionAction.ALLOW
        assert config.permissions[OperationType.READ] == DEFAULT_PERMISSIONS[OperationType.READ]

    def test_partial_table_is_completed_from_default(self):
        """Test a table missing a tier falls back to that tier's default."""
        config = parse_permission_config(
            {"permissions": {"create": {"internal": "allow"}}}
        )
        table = config.permissions[OperationType.CREATE]
        assert table.internal is PermissionAction.ALLOW
        assert table.self_only is PermissionAction.ALLOW
        assert table.external is PermissionAction.DENY

    def test_invalid_action_falls_back_to_default(self):
        """Test an unknown verdict string falls back to the operation default."""
        config = parse_permission_config(
            {"permissions": {"update": {"self_only": "maybe"}}}
        )
        assert config.permissions[OperationType.UPDATE] == DEFAULT_PERMISSIONS[OperationType.UPDATE]

    def test_non_string_internal_domain_is_ignored(self):
        """Test a wrongly typed internalDomain disables the internal tier."""
        assert parse_permission_config({"internalDomain": 42}).internal_domain == ""

    def test_every_operation_resolves(self):
        """Test every operation has a verdict for every tier after parsing."""
        config = parse_permission_config({"permissions": "nonsense"})
        for operation in OperationType:
            for condition in AttendeeCondition:
                assert config.permissions[operation].action_for(condition) in PermissionAction


class TestCheckPermission:
    """Tests for check_permission."""

    def test_delete_internal_denied(self, policy_file):
        """Test a delete touching one colleague is denied with the internal tier."""
        path = policy_file(
            {
                "calendar": {
                    "internalDomain": "example.com",
                    "permissions": {
                        "delete": {"self_only": "allow", "internal": "deny", "external": "deny"}
                    },
                }
            }
        )
        config = load_permission_config(path)

        result = check_permission(config, OperationType.DELETE, ["bob@example.com"], SELF)

        assert result.action is PermissionAction.DENY
        assert result.condition is AttendeeCondition.INTERNAL
        assert result.allowed is False

    def test_create_self_only_allowed_by_default(self):
        """Test a private event can be created under the default policy."""
        result = check_permission(default_permission_config(), "create", [SELF], SELF)
        assert result.allowed is True
        assert result.condition is AttendeeCondition.SELF_ONLY

    def test_string_operation_accepted(self):
        """Test operations can be passed by name."""
        result = check_permission(default_permission_config(), "read", ["x@y.z"], SELF)
        assert result.allowed is True

    def test_unknown_operation_rejected(self):
        """Test an unknown operation name is a programming error."""
        with pytest.raises(ValueError):
            check_permission(default_permission_config(), "archive", [], SELF)

    def test_idempotent(self):
        """Test identical inputs give identical verdicts."""
        config = default_permission_config()
        attendees = ["bob@example.com", "eve@other.org"]
        first = check_permission(config, OperationType.UPDATE, attendees, SELF)
        second = check_permission(config, OperationType.UPDATE, attendees, SELF)
        assert first == second


class TestDenyMessage:
    """Tests for deny_message."""

    def test_names_operation_and_tier(self):
        """Test the message explains which tier triggered the denial."""
        message = deny_message(OperationType.DELETE, AttendeeCondition.EXTERNAL)
        assert "Deleting" in message
        assert "external attendees" in message
        assert "external" in message

    def test_self_only_label(self):
        """Test the self-only label."""
        assert "only yourself" in deny_message("delete", AttendeeCondition.SELF_ONLY)
