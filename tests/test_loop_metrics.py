from cityloops.services.loop_metrics import calculate_loop_metrics, format_minutes


def test_format_minutes():
    assert format_minutes(45) == "45min"
    assert format_minutes(120) == "2h"
    assert format_minutes(135) == "2h 15min"


def test_empty_loop():
    metrics = calculate_loop_metrics([])
    assert (metrics.estimated_duration, metrics.recommended_transport, metrics.difficulty) == (
        "0h", "Walking", "Easy",
    )


def test_short_walk():
    # 30 + 20 + 10
    metrics = calculate_loop_metrics(["Cafe", "Landmark"])
    assert metrics.estimated_duration == "1h"
    assert metrics.recommended_transport == "Walking"
    assert metrics.difficulty == "Easy"


def test_unknown_category_uses_default():
    assert calculate_loop_metrics(["Spa"]).estimated_duration == "30min"


def test_moderate_loop():
    # 90 + 60 + 45 + 45 + 3 * 10 = 270
    metrics = calculate_loop_metrics(["Museum", "Restaurant", "Park", "Gallery"])
    assert metrics.estimated_duration == "4h 30min"
    assert metrics.recommended_transport == "Walking / Public Transport"
    assert metrics.difficulty == "Moderate"


def test_long_loop():
    metrics = calculate_loop_metrics(["Museum"] * 7)
    assert metrics.recommended_transport == "Public Transport / Car"
    assert metrics.difficulty == "Challenging"
