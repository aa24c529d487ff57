from vocabulary.indexes import build_indexes, chart_data, occurrence_buckets
from vocabulary.ngrams import cut


def test_cat_car_occurrences(cat_car_snapshot):
    occ = cat_car_snapshot.indexes.occurrences
    assert occ["word"]["ca"] == 2
    assert occ["is_animal"]["ca"] == 1
    assert occ["is_animal"] == {"ca": 1, "at": 1, "cat": 1}
    assert occ["is_verb"] == {}


def test_histograms_sum_to_list_counts(zoo_snapshot):
    idx = zoo_snapshot.indexes
    assert idx.counts == {"word": 13, "is_animal": 4, "is_verb": 4}
    for name, count in idx.counts.items():
        assert sum(idx.lengths[name].values()) == count
        assert sum(idx.alphabet[name].values()) == count
        assert sum(idx.unique_letters[name].values()) == count


def test_occurrence_counts_are_bounded(zoo_snapshot):
    idx = zoo_snapshot.indexes
    max_grams = max(len(cut(e.word) or ()) for e in zoo_snapshot.entries)
    for name, occ in idx.occurrences.items():
        assert sum(occ.values()) <= idx.counts[name] * max_grams
        assert all(0 < n <= idx.counts[name] for n in occ.values())


def test_each_entry_contributes_once_per_ngram(zoo_snapshot):
    # "running" holds "n" twice but "nn"/"in"/"ng" once each
    occ = zoo_snapshot.indexes.occurrences["word"]
    assert occ["un"] == 2  # run, running
    assert occ["nn"] == 1


def test_excluded_words_only_feed_histograms(zoo_snapshot):
    idx = zoo_snapshot.indexes
    assert "do" in idx.occurrences["word"]
    assert "on" not in idx.occurrences["is_verb"]  # only from "don't"
    assert idx.lengths["is_verb"][5] == 2  # dodge, don't
    assert idx.lengths["word"][10] == 1  # well-being


def test_histogram_keys(cat_car_snapshot):
    idx = cat_car_snapshot.indexes
    assert idx.alphabet["word"] == {"C": 2}
    assert idx.lengths["word"] == {3: 2}
    assert idx.unique_letters["word"] == {3: 2}


def test_chart_series_are_sorted(zoo_snapshot):
    charts = zoo_snapshot.indexes.charts
    for name in zoo_snapshot.indexes.counts:
        letters = [row.letter for row in charts.alphabet[name]]
        assert letters == sorted(letters)
        lengths = [row.length for row in charts.lengths[name]]
        assert lengths == sorted(lengths)
        uniques = [row.uniqueLetters for row in charts.unique_letters[name]]
        assert uniques == sorted(uniques)
        buckets = [row.wordsPerSyllable for row in charts.occ[name]]
        assert buckets == sorted(buckets)


def test_occurrence_buckets_count_keys_per_frequency():
    rows = occurrence_buckets({"ca": 2, "at": 1, "ar": 1, "cat": 1})
    assert [(r.wordsPerSyllable, r.syllablesWithCount) for r in rows] == [(1, 3), (2, 1)]


def test_build_is_value_equal_across_runs(zoo_snapshot):
    again = build_indexes(zoo_snapshot.entries, zoo_snapshot.list_names)
    assert again == zoo_snapshot.indexes


def test_unknown_tag_list_is_empty(zoo_snapshot):
    idx = build_indexes(zoo_snapshot.entries, ["word", "is_demonym"])
    assert idx.counts["is_demonym"] == 0
    assert idx.occurrences["is_demonym"] == {}


def test_chart_data_caps_occurrence_rows(zoo_snapshot):
    data = chart_data(zoo_snapshot.indexes, limit=1)
    assert set(data.occ.bottom) == {"word", "is_animal", "is_verb"}
    assert all(len(rows) <= 1 for rows in data.occ.bottom.values())
    assert data.alphabet["word"] == zoo_snapshot.indexes.charts.alphabet["word"]
