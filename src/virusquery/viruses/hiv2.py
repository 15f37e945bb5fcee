"""HIV-2 configuration."""

from virusquery.viruses.config import Drug, DrugClass, Gene, Strain, VirusConfig

HIV2 = VirusConfig(
    name="HIV2",
    strains=(
        Strain(name="HIV2A", display_text="HIV-2 Group A"),
        Strain(name="HIV2B", display_text="HIV-2 Group B"),
    ),
    genes=(
        Gene(name="HIV2PR", abstract_gene="PR", ordinal=0, length=99, drug_classes=("PI",)),
        Gene(name="HIV2RT", abstract_gene="RT", ordinal=1, length=559, drug_classes=("NRTI",)),
        Gene(name="HIV2IN", abstract_gene="IN", ordinal=2, length=293, drug_classes=("INSTI",)),
    ),
    drug_classes=(
        DrugClass(
            name="PI",
            full_name="Protease Inhibitor",
            abstract_gene="PR",
            drugs=(
                Drug(name="DRV", full_name="darunavir/r", display_abbr="DRV/r", drug_class="PI"),
                Drug(name="LPV", full_name="lopinavir/r", display_abbr="LPV/r", drug_class="PI"),
                Drug(name="SQV", full_name="saquinavir/r", display_abbr="SQV/r", drug_class="PI"),
            ),
        ),
        DrugClass(
            name="NRTI",
            full_name="Nucleoside Reverse Transcriptase Inhibitor",
            abstract_gene="RT",
            drugs=(
                Drug(name="ABC", full_name="abacavir", display_abbr="ABC", drug_class="NRTI"),
                Drug(name="AZT", full_name="zidovudine", display_abbr="AZT", drug_class="NRTI"),
                Drug(name="FTC", full_name="emtricitabine", display_abbr="FTC", drug_class="NRTI"),
                Drug(name="LMV", full_name="lamivudine", display_abbr="3TC", drug_class="NRTI"),
                Drug(name="TDF", full_name="tenofovir", display_abbr="TDF", drug_class="NRTI"),
            ),
        ),
        DrugClass(
            name="INSTI",
            full_name="Integrase Strand Transfer Inhibitor",
            abstract_gene="IN",
            drugs=(
                Drug(name="BIC", full_name="bictegravir", display_abbr="BIC", drug_class="INSTI"),
                Drug(name="DTG", full_name="dolutegravir", display_abbr="DTG", drug_class="INSTI"),
                Drug(name="EVG", full_name="elvitegravir", display_abbr="EVG", drug_class="INSTI"),
                Drug(name="RAL", full_name="raltegravir", display_abbr="RAL", drug_class="INSTI"),
            ),
        ),
    ),
    mutation_types=("Major", "Accessory", "NRTI", "Other"),
    default_included_genes=("PR", "RT", "IN"),
    algorithms=("HIVDB_9.5",),
    default_algorithm="HIVDB_9.5",
)
