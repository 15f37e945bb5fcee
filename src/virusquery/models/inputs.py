"""Client-provided analysis inputs."""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from virusquery.exceptions import InputValidationError


def _missing_or_negative(value: Any) -> bool:
    return value is None or (isinstance(value, (int, float)) and value < 0)


def _describe(error: Exception) -> str:
    if isinstance(error, ValidationError):
        return "; ".join(
            f"{'.'.join(str(loc) for loc in item['loc'])}: {item['msg']}"
            for item in error.errors()
        )
    return str(error)


class UntranslatedRegionInput(BaseModel):
    name: str
    ref_start: int
    ref_end: int
    consensus: str


class CodonReadsInput(BaseModel):
    codon: str
    reads: int = Field(..., ge=0)


class PositionCodonReadsInput(BaseModel):
    gene: str
    position: int = Field(..., ge=1)
    total_reads: int = Field(..., ge=0)
    all_codon_reads: list[CodonReadsInput] = Field(default_factory=list)


class SequenceReadsInput(BaseModel):
    """Codon reads of one sample plus the cutoffs to apply to them."""

    name: str
    strain: str
    all_reads: list[PositionCodonReadsInput]
    untranslated_regions: list[UntranslatedRegionInput] = Field(default_factory=list)
    max_mixture_rate: float = 1.0
    min_prevalence: float = 0.0
    min_codon_reads: int = 1
    min_position_reads: int = 1

    @field_validator("max_mixture_rate", mode="before")
    @classmethod
    def _default_max_mixture_rate(cls, value: Any) -> Any:
        return 1.0 if _missing_or_negative(value) else value

    @field_validator("min_prevalence", mode="before")
    @classmethod
    def _default_min_prevalence(cls, value: Any) -> Any:
        return 0.0 if _missing_or_negative(value) else value

    @field_validator("min_codon_reads", "min_position_reads", mode="before")
    @classmethod
    def _default_min_reads(cls, value: Any) -> Any:
        return 1 if _missing_or_negative(value) else value

    @classmethod
    def from_arguments(cls, data: Mapping[str, Any]) -> "SequenceReadsInput":
        """Build an input from the camelCase argument surface.

        Raises:
            InputValidationError: If ``name``, ``strain`` or ``allReads`` is missing, or if a
                nested entry lacks a key or holds an invalid value
        """
        for required in ("name", "strain", "allReads"):
            if data.get(required) is None:
                raise InputValidationError(
                    f"`{required}` is a required field but doesn't have value",
                    item=data.get("name"),
                )
        try:
            return cls._from_camel_case(data)
        except KeyError as e:
            raise InputValidationError(
                f"`{e.args[0]}` is a required field but doesn't have value", item=data.get("name")
            ) from e
        except (ValidationError, TypeError) as e:
            raise InputValidationError(
                f"Invalid sequence reads input {data.get('name')!r}: {_describe(e)}",
                item=data.get("name"),
            ) from e

    @classmethod
    def _from_camel_case(cls, data: Mapping[str, Any]) -> "SequenceReadsInput":
        return cls(
            name=data["name"],
            strain=data["strain"],
            all_reads=[
                PositionCodonReadsInput(
                    gene=reads["gene"],
                    position=reads["position"],
                    total_reads=reads["totalReads"],
                    all_codon_reads=[
                        CodonReadsInput(codon=codon["codon"], reads=codon["reads"])
                        for codon in reads.get("allCodonReads") or ()
                    ],
                )
                for reads in data["allReads"]
            ],
            untranslated_regions=[
                UntranslatedRegionInput(
                    name=region["name"],
                    ref_start=region["refStart"],
                    ref_end=region["refEnd"],
                    consensus=region["consensus"],
                )
                for region in data.get("untranslatedRegions") or ()
            ],
            max_mixture_rate=data.get("maxMixtureRate"),
            min_prevalence=data.get("minPrevalence"),
            min_codon_reads=data.get("minCodonReads"),
            min_position_reads=data.get("minPositionReads"),
        )
