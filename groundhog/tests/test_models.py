"""Tests for weather models — conversion, expiry, serialization."""

import json

import pytest
from pydantic import ValidationError

from conftest import ZOCCA_API_RESPONSE, ZOCCA_JSON
from groundhog.models.weather import ApiError, WeatherModel


def test_raw_response_converts_to_city_weather(zocca):
    assert WeatherModel.model_validate(ZOCCA_API_RESPONSE).to_city_weather() == zocca


def test_to_json_matches_sdk_shape(zocca):
    assert json.loads(zocca.to_json()) == json.loads(ZOCCA_JSON)


def test_is_expired(zocca):
    assert not zocca.is_expired(now=zocca.datetime + 600, ttl=600)
    assert zocca.is_expired(now=zocca.datetime + 601, ttl=600)


def test_city_weather_is_immutable(zocca):
    with pytest.raises(ValidationError):
        zocca.name = "Elsewhere"


def test_api_error_accepts_string_code():
    error = ApiError.model_validate({"cod": "404", "message": "city not found"})
    assert error.cod == 404
