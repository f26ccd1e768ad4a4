from weekly_finance.config import Settings


def test_development_logs_to_console():
    assert Settings(environment="development", log_json=False).json_logs is False


def test_production_logs_json():
    assert Settings(environment="production", log_json=False).json_logs is True


def test_json_logs_can_be_forced():
    assert Settings(environment="development", log_json=True).json_logs is True
