from treerings.utils import format_count, format_time, time_function_call


def test_format_count_of_nodes():
    assert format_count(950) == "950"
    assert format_count(12_345) == "12.3K"
    assert format_count(2_500_000) == "2.5M"


def test_format_time():
    assert format_time(0.0123) == "12 ms"
    assert format_time(3.4) == "3s"
    assert format_time(65) == "1m 5s"
    assert format_time(7207) == "2h 0m 7s"


def test_time_function_call_returns_result_and_duration():
    result, seconds = time_function_call(sorted, [3, 1, 2], reverse=True)
    assert result == [3, 2, 1]
    assert seconds >= 0
