from protean.exceptions import ObjectNotFoundError, ValidationError

from shared.result import CommandResult, flatten_messages


class TestFlattenMessages:
    def test_dict_of_lists(self):
        assert flatten_messages({"email": ["is required", "is invalid"]}) == [
            "email: is required",
            "email: is invalid",
        ]

    def test_dict_with_scalar_value(self):
        assert flatten_messages({"quantity": "must be positive"}) == ["quantity: must be positive"]

    def test_plain_string(self):
        assert flatten_messages("boom") == ["boom"]

    def test_none(self):
        assert flatten_messages(None) == []


class TestCommandResult:
    def test_ok(self):
        result = CommandResult.ok({"cart_id": "abc"})
        assert result.success is True
        assert result.data == {"cart_id": "abc"}
        assert result.error is None

    def test_fail_defaults_errors_to_the_message(self):
        result = CommandResult.fail("Cart is locked")
        assert result.success is False
        assert result.errors == ["Cart is locked"]

    def test_from_validation_error(self):
        result = CommandResult.from_exception(ValidationError({"quantity": ["must be positive"]}))
        assert result.success is False
        assert result.error == "quantity: must be positive"
        assert result.errors == ["quantity: must be positive"]

    def test_from_not_found(self):
        result = CommandResult.from_exception(ObjectNotFoundError("Order with id 42 does not exist"))
        assert result.error == "Resource not found"
        assert result.errors == ["Order with id 42 does not exist"]

    def test_from_arbitrary_exception(self):
        assert CommandResult.from_exception(RuntimeError()).error == "RuntimeError"

    def test_serializes_to_envelope_shape(self):
        assert set(CommandResult.ok().model_dump()) == {"success", "data", "error", "errors"}
