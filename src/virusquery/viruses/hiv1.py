"""HIV-1 configuration."""

from virusquery.viruses.config import Drug, DrugClass, Gene, Strain, VirusConfig
from virusquery.viruses.extensions import extend_hiv1


def _drugs(drug_class: str, drugs: list[tuple[str, str, str]]) -> tuple[Drug, ...]:
    return tuple(
        Drug(name=name, full_name=full_name, display_abbr=abbr, drug_class=drug_class)
        for name, abbr, full_name in drugs
    )


HIV1 = VirusConfig(
    name="HIV1",
    strains=(Strain(name="HIV1", display_text="HIV-1"),),
    genes=(
        Gene(name="HIV1PR", abstract_gene="PR", ordinal=0, length=99, drug_classes=("PI",)),
        Gene(
            name="HIV1RT",
            abstract_gene="RT",
            ordinal=1,
            length=560,
            drug_classes=("NRTI", "NNRTI"),
        ),
        Gene(name="HIV1IN", abstract_gene="IN", ordinal=2, length=288, drug_classes=("INSTI",)),
    ),
    drug_classes=(
        DrugClass(
            name="PI",
            full_name="Protease Inhibitor",
            abstract_gene="PR",
            drugs=_drugs(
                "PI",
                [
                    ("ATV", "ATV/r", "atazanavir/r"),
                    ("DRV", "DRV/r", "darunavir/r"),
                    ("FPV", "FPV/r", "fosamprenavir/r"),
                    ("IDV", "IDV/r", "indinavir/r"),
                    ("LPV", "LPV/r", "lopinavir/r"),
                    ("NFV", "NFV", "nelfinavir"),
                    ("SQV", "SQV/r", "saquinavir/r"),
                    ("TPV", "TPV/r", "tipranavir/r"),
                ],
            ),
        ),
        DrugClass(
            name="NRTI",
            full_name="Nucleoside Reverse Transcriptase Inhibitor",
            abstract_gene="RT",
            drugs=_drugs(
                "NRTI",
                [
                    ("ABC", "ABC", "abacavir"),
                    ("AZT", "AZT", "zidovudine"),
                    ("D4T", "D4T", "stavudine"),
                    ("DDI", "DDI", "didanosine"),
                    ("FTC", "FTC", "emtricitabine"),
                    ("LMV", "3TC", "lamivudine"),
                    ("TDF", "TDF", "tenofovir"),
                ],
            ),
        ),
        DrugClass(
            name="NNRTI",
            full_name="Non-nucleoside Reverse Transcriptase Inhibitor",
            abstract_gene="RT",
            drugs=_drugs(
                "NNRTI",
                [
                    ("DOR", "DOR", "doravirine"),
                    ("EFV", "EFV", "efavirenz"),
                    ("ETR", "ETR", "etravirine"),
                    ("NVP", "NVP", "nevirapine"),
                    ("RPV", "RPV", "rilpivirine"),
                ],
            ),
        ),
        DrugClass(
            name="INSTI",
            full_name="Integrase Strand Transfer Inhibitor",
            abstract_gene="IN",
            drugs=_drugs(
                "INSTI",
                [
                    ("BIC", "BIC", "bictegravir"),
                    ("CAB", "CAB", "cabotegravir"),
                    ("DTG", "DTG", "dolutegravir"),
                    ("EVG", "EVG", "elvitegravir"),
                    ("RAL", "RAL", "raltegravir"),
                ],
            ),
        ),
    ),
    mutation_types=("Major", "Accessory", "NRTI", "NNRTI", "Other"),
    default_included_genes=("PR", "RT", "IN"),
    algorithms=("HIVDB_9.5", "ANRS_3.2", "Rega_10.0"),
    default_algorithm="HIVDB_9.5",
    extension=extend_hiv1,
)
