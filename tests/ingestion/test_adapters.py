"""Tests for source adapters."""

from decimal import Decimal

from payroll_ingestion.adapters import CsvSourceAdapter, JsonSourceAdapter, SourceProbe


class TestCsvSourceAdapter:
    """CSV adapter: line numbers, quoting, BOM, delimiter, probe, write."""

    def test_read_yields_line_numbers(self, tmp_path):
        path = tmp_path / "a.csv"
        path.write_text("a,b,c\n1,2,3\n\n4,5,6\n", encoding="utf-8")
        rows = list(CsvSourceAdapter().read(path, {}))
        assert rows == [(1, ["a", "b", "c"]), (2, ["1", "2", "3"]), (4, ["4", "5", "6"])]

    def test_quoted_newline_keeps_start_line(self):
        text = 'nom,adresse\nRabe,"Lot 1\nAnalakely"\nSoa,Ivandry\n'
        rows = list(CsvSourceAdapter().read_text(text, {}))
        assert rows[1] == (2, ["Rabe", "Lot 1\nAnalakely"])
        assert rows[2] == (4, ["Soa", "Ivandry"])

    def test_bom_stripped_from_file(self, tmp_path):
        path = tmp_path / "bom.csv"
        path.write_bytes("Prénom,Nom\nJean,Dupont\n".encode("utf-8-sig"))
        rows = list(CsvSourceAdapter().read(path, {}))
        assert rows[0] == (1, ["Prénom", "Nom"])

    def test_custom_delimiter(self):
        rows = list(CsvSourceAdapter().read_text("a;b\n1;2\n", {"delimiter": ";"}))
        assert rows == [(1, ["a", "b"]), (2, ["1", "2"])]

    def test_probe_returns_row_count_and_columns(self, tmp_path):
        path = tmp_path / "p.csv"
        path.write_text("x,y\n1,2\n3,4\n5,6\n", encoding="utf-8")
        probe = CsvSourceAdapter().probe(path, {})
        assert probe == SourceProbe(row_count=3, columns=("x", "y"), encoding="utf-8-sig")

    def test_write_quotes_only_when_needed(self, tmp_path):
        adapter = CsvSourceAdapter()
        text = adapter.write_text(["a", "b"], [["1", 'Lot 2, "B"']])
        assert text == 'a,b\n1,"Lot 2, ""B"""\n'

        path = tmp_path / "out.csv"
        adapter.write(path, text)
        assert path.read_bytes().startswith(b"\xef\xbb\xbf")
        assert list(adapter.read(path, {}))[1] == (2, ["1", 'Lot 2, "B"'])


class TestJsonSourceAdapter:
    """JSON adapter: Decimal in, numbers out."""

    def test_fractions_read_as_decimal(self):
        data = JsonSourceAdapter().read_text('{"amount": 1250.50, "count": 3}', {})
        assert data == {"amount": Decimal("1250.50"), "count": 3}
        assert isinstance(data["amount"], Decimal)

    def test_decimals_written_as_numbers(self):
        adapter = JsonSourceAdapter()
        text = adapter.write_text({"a": Decimal("250000"), "b": Decimal("0.10")}, pretty=False)
        assert text == '{"a":250000,"b":0.1}'

    def test_pretty_keeps_unicode(self):
        text = JsonSourceAdapter().write_text({"nom": "Département"})
        assert text == '{\n  "nom": "Département"\n}'

    def test_probe_counts_collection_items(self, tmp_path):
        path = tmp_path / "backup.json"
        path.write_text('{"employees": [{}, {}], "advances": [{}], "version": 1}', encoding="utf-8")
        probe = JsonSourceAdapter().probe(path, {})
        assert probe.row_count == 3
        assert probe.columns == ("advances", "employees")
