"""
Pytest configuration and fixtures
"""

import pytest
from unittest.mock import Mock

from helium.config.gateway import DEFAULT_PREFERENCES_PATH, MemoryGateway
from helium.managers.widget_set import WIDGET_PROPERTIES_KEY, WidgetSetStore
from helium.platforms.notifier import ReloadNotifier


@pytest.fixture
def sample_widget_sets():
    """Persisted widget sets as the overlay stores them"""
    return [
        {
            "isEnabled": True,
            "orientationMode": 0,
            "title": "Main",
            "updateInterval": 1.0,
            "anchor": 0,
            "anchorY": 0,
            "offsetPX": 10.0,
            "offsetPY": 0.0,
            "offsetLX": 10.0,
            "offsetLY": 0.0,
            "autoResizes": True,
            "scale": 100.0,
            "scaleY": 12.0,
            "widgetIDs": [
                {"widgetID": 2, "isUp": True, "speedIcon": 1},
                {"widgetID": 5, "dateFormat": "HH:mm"},
            ],
            "blurDetails": {"hasBlur": False, "cornerRadius": 4, "styleDark": True, "alpha": 1.0},
            "dynamicColor": True,
            "colorDetails": {"usesCustomColor": False, "color": b"\xff\xff\xff\xff"},
            "fontName": "System Font",
            "textBold": False,
            "textItalic": False,
            "textAlignment": 1,
            "fontSize": 10.0,
            "textAlpha": 1.0,
        },
        {
            "title": "Battery",
            "anchor": 2,
            "widgetIDs": [
                {"widgetID": 7},
                {"widgetID": 8, "filled": False},
            ],
        },
    ]


@pytest.fixture
def memory_gateway():
    """Empty in-memory preferences"""
    return MemoryGateway()


@pytest.fixture
def populated_gateway(sample_widget_sets):
    """In-memory preferences holding the sample widget sets"""
    return MemoryGateway({DEFAULT_PREFERENCES_PATH: {WIDGET_PROPERTIES_KEY: sample_widget_sets}})


@pytest.fixture
def mock_notifier():
    """Mock reload notifier"""
    return Mock(spec=ReloadNotifier)


@pytest.fixture
def mock_overlay_host():
    """Mock overlay host reporting the overlay as running"""
    host = Mock()
    host.is_enabled.return_value = True
    host.restart.return_value = True
    return host


@pytest.fixture
def store(memory_gateway, mock_notifier, mock_overlay_host):
    """Store over empty in-memory preferences"""
    return WidgetSetStore(
        memory_gateway, notifier=mock_notifier, overlay_host=mock_overlay_host
    )


@pytest.fixture
def populated_store(populated_gateway, mock_notifier):
    """Store loaded from the sample widget sets"""
    return WidgetSetStore(populated_gateway, notifier=mock_notifier)


@pytest.fixture(autouse=True)
def no_subprocess_calls(monkeypatch):
    """Prevent actual subprocess calls during testing"""
    mock_popen = Mock()
    mock_popen.returncode = 0
    monkeypatch.setattr("subprocess.Popen", Mock(return_value=mock_popen))
    monkeypatch.setattr("subprocess.run", Mock(return_value=Mock(returncode=0)))
