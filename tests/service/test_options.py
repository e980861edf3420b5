"""Tests for service option models."""

import pytest
from pydantic import ValidationError

from crudkit.service import ServiceOptions, UploadOptions
from crudkit.service.options import load_service_options, strip_route_keys


class TestServiceOptions:
    """Test ServiceOptions validation."""

    def test_camel_and_snake_case(self):
        camel = ServiceOptions.model_validate(
            {"findAll": {"searchProperties": ["name"], "defaultLimit": 5}}
        )
        snake = ServiceOptions.model_validate(
            {"find_all": {"search_properties": ["name"], "default_limit": 5}}
        )
        assert camel == snake
        assert camel.find_all.search_properties == ["name"]

    def test_absent_operations(self):
        options = ServiceOptions.model_validate({"find": {}})
        assert options.has_operation("find")
        assert not options.has_operation("find_all")
        assert not options.has_operation("destroy")

    def test_bool_sections(self):
        options = ServiceOptions.model_validate({"find": True, "update": False})
        assert options.find is not None
        assert options.update is None

    @pytest.mark.parametrize(
        "value,expected", [(True, True), ({}, True), (None, False)]
    )
    def test_delete_flag(self, value, expected):
        options = ServiceOptions.model_validate({"delete": value})
        assert options.delete is expected
        assert options.has_operation("delete") is expected

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            ServiceOptions.model_validate({"find": {"projection": ["name"]}})
        with pytest.raises(ValidationError):
            ServiceOptions.model_validate({"search": {}})

    @pytest.mark.parametrize("limit", [0, -1])
    def test_default_limit_positive(self, limit):
        with pytest.raises(ValidationError):
            ServiceOptions.model_validate({"findAll": {"defaultLimit": limit}})

    def test_frozen(self):
        options = ServiceOptions.model_validate({"find": {}})
        with pytest.raises(ValidationError):
            options.debug = True

    def test_load_passthrough(self):
        options = ServiceOptions()
        assert load_service_options(options) is options
        assert load_service_options(None) == ServiceOptions()


class TestUploadOptions:
    """Test UploadOptions validation."""

    def test_requires_backend(self):
        with pytest.raises(ValidationError):
            UploadOptions.model_validate({"fields": ["image"]})

    def test_custom_service(self):
        service = object()
        options = UploadOptions.model_validate(
            {"fields": ["image"], "customService": service}
        )
        assert options.custom_service is service

    def test_s3(self):
        options = UploadOptions.model_validate(
            {"fields": ["image"], "s3": {"bucketName": "assets"}}
        )
        assert options.s3.bucket_name == "assets"


def test_strip_route_keys():
    options = strip_route_keys(
        {
            "find": {"dependencies": [], "includes": [], "dto": ["name"]},
            "create": {"service_only": True, "properties": ["name"]},
            "delete": True,
        }
    )
    assert options == {
        "find": {"dto": ["name"]},
        "create": {"properties": ["name"]},
        "delete": True,
    }
