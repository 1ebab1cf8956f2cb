"""Tests for cross-source deduplication."""

from tender_search.sourcing.dedup import dedup_key, deduplicate, normalize_title


class TestNormalizeTitle:
    """Tests for title normalization."""

    def test_accents_and_punctuation(self):
        """Test accents are folded and punctuation removed."""
        assert normalize_title("Réfection de la Voirie - Lot n°2") == "refectiondelavoirielotn2"

    def test_empty(self):
        """Test empty titles normalize to empty."""
        assert normalize_title("") == ""
        assert normalize_title("!!! ---") == ""


class TestDedupKey:
    """Tests for the composite key."""

    def test_key_truncation(self, make_record):
        """Test title and buyer are truncated in the key."""
        record = make_record(title="x" * 80, buyer="Communauté d'agglomération du Pays")
        title, buyer = dedup_key(record).split("_", 1)
        assert len(title) == 50
        assert buyer == "communauté d'agglomé"

    def test_same_tender_across_sources(self, make_record):
        """Test formatting differences do not change the key."""
        a = make_record("boamp", "1", title="Réfection de la voirie", buyer="Ville de Lyon")
        b = make_record("ted", "9", title="REFECTION DE LA VOIRIE.", buyer="ville de lyon")
        assert dedup_key(a) == dedup_key(b)

    def test_no_key_without_title(self, make_record):
        """Test records without a usable title have no key."""
        assert dedup_key(make_record(title="---")) is None


class TestDeduplicate:
    """Tests for merging duplicates."""

    def test_value_wins(self, make_record):
        """Test the record with an estimated value is kept."""
        without = make_record("boamp", "1", title="Nettoyage des locaux", buyer="CHU de Nantes")
        with_value = make_record(
            "ted", "1", title="Nettoyage des locaux", buyer="CHU de Nantes", estimated_value=50000.0
        )

        result = deduplicate([without, with_value])

        assert [r.id for r in result] == ["ted_1"]

    def test_value_wins_over_description(self, make_record):
        """Test a known value beats a longer description."""
        verbose = make_record("boamp", "1", title="Audit", buyer="X", description="long " * 50)
        valued = make_record("ted", "1", title="Audit", buyer="X", estimated_value=10.0)

        assert deduplicate([verbose, valued]) == [valued]

    def test_longer_description_wins(self, make_record):
        """Test the longer description wins when neither has a value."""
        short = make_record("boamp", "1", title="Audit", buyer="X", description="court")
        long = make_record("ted", "1", title="Audit", buyer="X", description="beaucoup plus long")

        assert deduplicate([short, long]) == [long]

    def test_tie_keeps_first(self, make_record):
        """Test equal informativeness keeps the first record seen."""
        first = make_record("boamp", "1", title="Audit", buyer="X", description="abc")
        second = make_record("ted", "1", title="Audit", buyer="X", description="xyz")

        assert deduplicate([first, second]) == [first]

    def test_different_buyers_kept(self, make_record):
        """Test the same title from different buyers is not merged."""
        a = make_record("boamp", "1", title="Audit", buyer="Ville de Brest")
        b = make_record("ted", "1", title="Audit", buyer="Ville de Quimper")

        assert len(deduplicate([a, b])) == 2

    def test_untitled_never_merged(self, make_record):
        """Test records without a usable title are all kept."""
        a = make_record("boamp", "1", title="", buyer="X")
        b = make_record("ted", "1", title="", buyer="X")

        assert deduplicate([a, b]) == [a, b]

    def test_first_appearance_order(self, make_record):
        """Test the survivor takes the position of the first duplicate."""
        a = make_record("boamp", "1", title="Audit", buyer="X")
        b = make_record("boamp", "2", title="Voirie", buyer="Y")
        c = make_record("ted", "1", title="Audit", buyer="X", estimated_value=1.0)

        assert [r.id for r in deduplicate([a, b, c])] == ["ted_1", "boamp_2"]

    def test_idempotent(self, make_record):
        """Test deduplicating the output again changes nothing."""
        records = [
            make_record("boamp", "1", title="Audit", buyer="X"),
            make_record("ted", "1", title="AUDIT", buyer="x", description="détaillé"),
            make_record("internal", "1", title="Audit", buyer="X", estimated_value=5.0),
            make_record("boamp", "2", title="Voirie", buyer="Y"),
            make_record("ted", "2", title="", buyer="Y"),
        ]

        once = deduplicate(records)
        twice = deduplicate(once)

        assert twice == once
        assert [r.id for r in once] == ["internal_1", "boamp_2", "ted_2"]

    def test_empty(self):
        """Test an empty input yields an empty output."""
        assert deduplicate([]) == []
