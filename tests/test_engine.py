"""Tests for the async query engine."""

import pytest

from virusquery.config import Settings
from virusquery.engine import FieldRequest, QueryEngine
from virusquery.exceptions import CollaboratorUnavailableError, UnknownVirusError
from virusquery.models.validation import ValidationLevel
from virusquery.resolvers.sources import SourceKind

from conftest import FakeAlignment, FakeProcessor, FakeProvider


def reads_input(name="sample-1", strain="HIV1", **extra):
    data = {
        "name": name,
        "strain": strain,
        "allReads": [
            {
                "gene": "RT",
                "position": 184,
                "totalReads": 120,
                "allCodonReads": [{"codon": "ATG", "reads": 20}, {"codon": "GTG", "reads": 100}],
            }
        ],
    }
    data.update(extra)
    return data


@pytest.fixture
def engine():
    return QueryEngine(algorithms=FakeProvider(), settings=Settings(max_concurrent=2))


class TestQueryEngine:
    """Tests for QueryEngine."""

    @pytest.mark.asyncio
    async def test_context_manager(self, engine):
        """Test async context manager and default virus."""
        async with engine as active:
            schema = await active.get_schema()
            assert schema.virus == "HIV1"
            assert active.schemas.is_built("HIV1")

    @pytest.mark.asyncio
    async def test_schema_built_once(self, engine):
        """Test that repeated requests share one schema build."""
        schemas = [await engine.get_schema("HIV2") for _ in range(3)]
        assert schemas[0] is schemas[1] is schemas[2]
        assert engine.schemas.stats.builds == 1

    @pytest.mark.asyncio
    async def test_analyze_mutations(self, engine):
        """Test parsing a mutation list into a source."""
        source, errors = await engine.analyze_mutations("HIV1", "list-1", ["RT:M184V", "XYZ", "PR:L90M"])
        assert source.kind is SourceKind.MUTATIONS
        assert source.mutations.texts() == ["PR:L90M", "RT:M184V"]
        assert len(errors) == 1
        assert "XYZ" in errors[0].message

    @pytest.mark.asyncio
    async def test_resolve_many_isolates_failures(self, engine):
        """Test that a failing field does not affect its siblings."""
        source, _ = await engine.analyze_mutations("HIV1", "list-1", ["RT:M184V", "RT:K103N"])
        results = await engine.resolve_many(
            [
                FieldRequest(
                    type_name="MutationsAnalysis",
                    field_name="mutations",
                    source=source,
                    arguments={"customList": ["K103N"], "filterOptions": ["CUSTOMLIST"]},
                ),
                FieldRequest(type_name="MutationsAnalysis", field_name="nope", source=source),
                FieldRequest(
                    type_name="MutationsAnalysis", field_name="name", source=source, virus="HIV3"
                ),
                FieldRequest(type_name="MutationsAnalysis", field_name="mutationCount", source=source),
            ]
        )
        assert [result.ok for result in results] == [True, False, False, True]
        assert results[0].data.texts() == []
        assert len(results[0].validation_results) == 1
        assert "nope" in results[1].errors[0]
        assert "HIV3" in results[2].errors[0]
        assert results[3].data == 2

    @pytest.mark.asyncio
    async def test_resolve_many_isolates_wrong_source_kind(self, engine):
        """Test that a field given the wrong kind of source fails alone."""
        source, _ = await engine.analyze_mutations("HIV1", "list-1", ["RT:M184V"])
        results = await engine.resolve_many(
            [
                FieldRequest(type_name="MutationsAnalysis", field_name="mutations", source=source),
                FieldRequest(type_name="SequenceAnalysis", field_name="frameShifts", source=source),
                FieldRequest(
                    type_name="SequenceReadsAnalysis", field_name="codonReadsCoverage", source=source
                ),
                FieldRequest(
                    type_name="SequenceAnalysis", field_name="availableGenes", source=["RT:M184V"]
                ),
            ]
        )
        assert [result.ok for result in results] == [True, False, False, False]
        assert results[0].data.texts() == ["RT:M184V"]
        assert "kind alignment, got mutations" in results[1].errors[0]
        assert "kind reads, got mutations" in results[2].errors[0]
        assert "list" in results[3].errors[0]

    @pytest.mark.asyncio
    async def test_resolve_drug_resistance(self, engine):
        """Test that the configured provider reaches the resolvers."""
        source, _ = await engine.analyze_mutations("HIV1", None, ["RT:M184V"])
        result = await engine.resolve(
            FieldRequest(
                type_name="MutationsAnalysis",
                field_name="drugResistance",
                source=source,
                arguments={"includeGenes": ["RT"]},
            )
        )
        assert [item.gene for item in result.data] == ["RT"]
        assert result.data[0].algorithm == "HIVDB_9.5"

    @pytest.mark.asyncio
    async def test_resolve_sequence_field(self, engine, mixed_set):
        """Test resolving a field of an alignment source."""
        source = await engine.analyze_sequence("HIV1", FakeAlignment(mixed_set))
        result = await engine.resolve(
            FieldRequest(type_name="SequenceAnalysis", field_name="frameShiftCount", source=source)
        )
        assert result.data == 2

    @pytest.mark.asyncio
    async def test_analyze_sequence_unknown_virus(self, engine, mixed_set):
        """Test that the virus is checked."""
        with pytest.raises(UnknownVirusError):
            await engine.analyze_sequence("HIV3", FakeAlignment(mixed_set))


class TestAnalyzeSequenceReads:
    """Tests for sequence reads processing."""

    @pytest.mark.asyncio
    async def test_invalid_inputs_reported(self, engine):
        """Test that inputs missing required fields become validation results."""
        processor = FakeProcessor()
        sources, results = await engine.analyze_sequence_reads(
            "HIV1",
            [reads_input(minPrevalence=-1), reads_input(name="sample-2", strain=None)],
            processor=processor,
        )
        assert len(sources) == 1
        assert sources[0].kind is SourceKind.READS
        assert sources[0].payload.name == "sample-1"
        assert processor.processed[0].min_prevalence == 0.0
        assert processor.processed[0].all_reads[0].all_codon_reads[1].codon == "GTG"

        assert len(results) == 1
        assert results[0].level is ValidationLevel.CRITICAL
        assert results[0].message == "`strain` is a required field but doesn't have value"

    @pytest.mark.asyncio
    async def test_malformed_nested_reads_reported(self, engine):
        """Test that a bad sample is reported while the good one is processed."""
        processor = FakeProcessor()
        missing_gene = reads_input(name="no-gene", allReads=[{"position": 1, "totalReads": 5}])
        bad_position = reads_input(
            name="bad-position", allReads=[{"gene": "PR", "position": 0, "totalReads": 5}]
        )
        bad_cutoff = reads_input(name="bad-cutoff", minPrevalence="high")
        sources, results = await engine.analyze_sequence_reads(
            "HIV1",
            [missing_gene, reads_input(), bad_position, bad_cutoff],
            processor=processor,
        )
        assert [source.payload.name for source in sources] == ["sample-1"]
        assert [reads.name for reads in processor.processed] == ["sample-1"]

        assert [result.level for result in results] == [ValidationLevel.CRITICAL] * 3
        assert results[0].message == "`gene` is a required field but doesn't have value"
        assert "'bad-position'" in results[1].message
        assert "position" in results[1].message
        assert "min_prevalence" in results[2].message

    @pytest.mark.asyncio
    async def test_configured_processor(self):
        """Test that the engine's own processor is used by default."""
        processor = FakeProcessor()
        engine = QueryEngine(reads_processor=processor, settings=Settings())
        sources, results = await engine.analyze_sequence_reads("HIV1", [reads_input()])
        assert len(sources) == 1
        assert results == []
        assert len(processor.processed) == 1

    @pytest.mark.asyncio
    async def test_missing_processor(self, engine):
        """Test that reads analysis needs a processor."""
        with pytest.raises(CollaboratorUnavailableError):
            await engine.analyze_sequence_reads("HIV1", [reads_input()])
