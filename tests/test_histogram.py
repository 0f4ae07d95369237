from ldbkit.histogram import Histogram


def filled(values):
    hist = Histogram()
    for value in values:
        hist.add(value)
    return hist


def test_empty_report_header():
    report = str(Histogram())
    assert report.startswith("Count: 0  Average: 0.0000  StdDev: 0.00\n")
    assert report.endswith("------------------------------------------------------\n")


def test_empty_statistics():
    hist = Histogram()
    assert hist.average() == 0.0
    assert hist.standard_deviation() == 0.0
    assert hist.median() == 0.0


def test_single_value_median_is_value():
    hist = filled([5.0])
    assert hist.median() == 5.0
    assert hist.average() == 5.0


def test_constant_values_have_zero_deviation():
    hist = filled([7.0] * 25)
    assert hist.standard_deviation() == 0.0
    assert hist.average() == 7.0


def test_single_bucket_gets_full_marks():
    report = str(filled([3.0, 3.0]))
    assert "#" * 20 + "\n" in report
    assert "#" * 21 not in report


def test_percentile_monotonic_and_bounded():
    values = [1, 3, 8, 15, 42, 100, 250, 999, 5000, 12345]
    hist = filled(values)
    results = [hist.percentile(p) for p in (10, 25, 50, 75, 90, 99, 100)]
    assert results == sorted(results)
    assert all(min(values) <= r <= max(values) for r in results)


def test_merge_matches_combined():
    first = [1.0, 2.5, 40.0, 7000.0]
    second = [0.5, 3.0, 123456.0]
    merged = filled(first)
    merged.merge(filled(second))
    assert str(merged) == str(filled(first + second))


def test_clear_resets():
    hist = filled([10.0, 20.0, 30.0])
    hist.clear()
    assert str(hist) == str(Histogram())


def test_count_in_report():
    hist = filled([1.0, 2.0, 3.0, 4.0])
    assert str(hist).startswith("Count: 4  ")


def test_huge_values_land_in_last_bucket():
    hist = filled([1e12])
    assert hist.median() == 1e12
    assert "#" * 20 in str(hist)