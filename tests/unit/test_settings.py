"""
Tests for app settings and user data reset
"""

from unittest.mock import Mock

import pytest

from helium.config.gateway import DEFAULT_PREFERENCES_PATH, MemoryGateway
from helium.config.settings import AppSettings, reset_user_data
from helium.managers.widget_set import WIDGET_PROPERTIES_KEY
from helium.utils.errors import PersistenceError


class TestAppSettings:
    """Test loading and saving settings"""

    def test_defaults(self):
        """Empty preferences give the default settings"""
        settings = AppSettings.load(MemoryGateway())
        assert settings == AppSettings()
        assert settings.date_locale == "en_US"
        assert settings.api_key == ""
        assert settings.debug_border is False

    def test_load_stored_values(self):
        """Stored keys are read under their persisted names"""
        gateway = MemoryGateway(
            {DEFAULT_PREFERENCES_PATH: {"dateLocale": "zh_CN", "apiKey": "k", "debugBorder": True}}
        )
        settings = AppSettings.load(gateway)
        assert settings.date_locale == "zh_CN"
        assert settings.api_key == "k"
        assert settings.debug_border is True

    def test_load_mistyped_values(self):
        """Mistyped values keep their default"""
        gateway = MemoryGateway(
            {DEFAULT_PREFERENCES_PATH: {"dateLocale": 5, "hideSaveConfirmation": "yes"}}
        )
        settings = AppSettings.load(gateway)
        assert settings.date_locale == "en_US"
        assert settings.hide_save_confirmation is False

    def test_save_writes_every_key_and_notifies(self):
        """Saving writes all keys and signals the renderer"""
        gateway = MemoryGateway()
        notifier = Mock()
        AppSettings(api_key="secret").save(gateway, notifier=notifier)

        for key in ["dateLocale", "apiKey", "hideSaveConfirmation", "debugBorder", "hideWidgetsInScreenshot"]:
            assert gateway.contains(DEFAULT_PREFERENCES_PATH, key)
        assert gateway.get(DEFAULT_PREFERENCES_PATH, "apiKey") == "secret"
        notifier.notify.assert_called_once()

    def test_round_trip(self):
        """Saved settings load back unchanged"""
        gateway = MemoryGateway()
        original = AppSettings(date_locale="zh_CN", hide_widgets_in_screenshot=True)
        original.save(gateway)
        assert AppSettings.load(gateway) == original

    def test_key_for(self):
        """Attribute names map to persisted keys"""
        assert AppSettings.key_for("date_locale") == "dateLocale"
        with pytest.raises(KeyError):
            AppSettings.key_for("unknown")


class TestResetUserData:
    """Test deleting all user data"""

    def test_reset_removes_everything(self):
        """Widget sets and settings are all gone"""
        gateway = MemoryGateway(
            {DEFAULT_PREFERENCES_PATH: {WIDGET_PROPERTIES_KEY: [{}], "apiKey": "k"}}
        )
        reset_user_data(gateway)
        assert gateway.get(DEFAULT_PREFERENCES_PATH, WIDGET_PROPERTIES_KEY) is None
        assert gateway.get(DEFAULT_PREFERENCES_PATH, "apiKey") is None

    def test_reset_failure_message(self):
        """Failures carry a message for the user"""
        gateway = Mock()
        gateway.reset.side_effect = PersistenceError("permission denied")

        with pytest.raises(PersistenceError) as exc_info:
            reset_user_data(gateway)
        assert str(exc_info.value) == "Failed to delete user data: permission denied"
