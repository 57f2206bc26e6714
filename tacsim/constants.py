"""Constants and configuration for TAC dataset simulation.

Contains the target catalog, baseline prevalence table, sample types,
well grid geometry, result vocabulary, and simulation defaults.
"""

# ==================== TARGET CATALOG ====================
# Order matters: catalog position drives well assignment on every card.
TAC_TARGETS = (
    # Viruses
    "Adenovirus 40/41",
    "Astrovirus",
    "Norovirus GI",
    "Norovirus GII",
    "Rotavirus",
    "Sapovirus",
    "Enterovirus",
    "Hepatitis A",
    # Bacteria
    "Aeromonas",
    "Campylobacter jejuni/coli",
    "C. difficile tcdA/B",
    "EAEC aaiC",
    "EAEC aatA",
    "EPEC eae",
    "EPEC bfpA",
    "ETEC LT",
    "ETEC STh",
    "ETEC STp",
    "STEC stx1",
    "STEC stx2",
    "Salmonella",
    "Shigella/EIEC ipaH",
    "Vibrio cholerae",
    "Plesiomonas",
    "Yersinia",
    "H. pylori",
    # Protozoa and helminths
    "Cryptosporidium",
    "Giardia",
    "E. histolytica",
    "Cyclospora",
    "Ascaris",
    "Trichuris",
    "Necator",
    "Ancylostoma",
    # Resistance markers
    "blaCTX-M-1",
    "blaCTX-M-9",
    "blaSHV",
    "blaKPC",
    "blaNDM",
    "blaOXA-48",
    "mcr-1",
    "qnrS",
    "sul1",
    "intI1",
    # Source tracking
    "HF183",
    "crAssphage",
    # Controls
    "MS2",
    "PhHV",
)

# ==================== PREVALENCE ====================
# Baseline probability of detection in an effluent sample.
TARGET_PREVALENCE = {
    "Adenovirus 40/41": 0.35,
    "Astrovirus": 0.20,
    "Norovirus GI": 0.25,
    "Norovirus GII": 0.40,
    "Rotavirus": 0.30,
    "Sapovirus": 0.22,
    "Enterovirus": 0.45,
    "Hepatitis A": 0.05,
    "Aeromonas": 0.55,
    "Campylobacter jejuni/coli": 0.45,
    "C. difficile tcdA/B": 0.15,
    "EAEC aaiC": 0.50,
    "EAEC aatA": 0.55,
    "EPEC eae": 0.60,
    "EPEC bfpA": 0.30,
    "ETEC LT": 0.40,
    "ETEC STh": 0.25,
    "ETEC STp": 0.20,
    "STEC stx1": 0.10,
    "STEC stx2": 0.08,
    "Salmonella": 0.15,
    "Shigella/EIEC ipaH": 0.25,
    "Vibrio cholerae": 0.05,
    "Plesiomonas": 0.10,
    "Yersinia": 0.03,
    "H. pylori": 0.35,
    "Cryptosporidium": 0.20,
    "Giardia": 0.45,
    "E. histolytica": 0.05,
    "Cyclospora": 0.04,
    "Ascaris": 0.30,
    "Trichuris": 0.25,
    "Necator": 0.10,
    "Ancylostoma": 0.05,
    "blaCTX-M-1": 0.70,
    "blaCTX-M-9": 0.40,
    "blaSHV": 0.45,
    "blaKPC": 0.08,
    "blaNDM": 0.12,
    "blaOXA-48": 0.10,
    "mcr-1": 0.06,
    "qnrS": 0.50,
    "sul1": 0.90,
    "intI1": 0.90,
    "HF183": 0.80,
    "crAssphage": 0.85,
    "MS2": 0.95,
    "PhHV": 0.95,
}

# ==================== SAMPLE TYPES ====================
SAMPLE_TYPE_EFFLUENT = "effluent"
SAMPLE_TYPE_COMPOST = "compost"
SAMPLE_TYPE_PRODUCE = "produce"
SAMPLE_TYPE_NTC = "no-template-control"

SAMPLE_TYPES = (
    SAMPLE_TYPE_EFFLUENT,
    SAMPLE_TYPE_COMPOST,
    SAMPLE_TYPE_PRODUCE,
    SAMPLE_TYPE_NTC,
)

# Short codes used in sample identifiers (HH001_EF, ...)
SAMPLE_TYPE_CODES = {
    SAMPLE_TYPE_EFFLUENT: "EF",
    SAMPLE_TYPE_COMPOST: "CP",
    SAMPLE_TYPE_PRODUCE: "PR",
}

# Multiplier applied to the baseline prevalence per sample type.
SAMPLE_TYPE_ADJUSTMENT = {
    SAMPLE_TYPE_EFFLUENT: 1.0,
    SAMPLE_TYPE_COMPOST: 0.6,
    SAMPLE_TYPE_PRODUCE: 0.3,
    SAMPLE_TYPE_NTC: 0.0,
}

NTC_ID_TEMPLATE = "NTC_card{index:02d}"

# ==================== WELL GRID ====================
# One sample port of a 384-well array card feeds 48 wells.
WELL_ROWS = "ABCD"
WELL_COLUMNS = tuple(range(1, 13))

# ==================== RESULT TABLE ====================
RESULT_COLUMNS = [
    "Well",
    "Card",
    "Sample",
    "Household",
    "Sample Type",
    "Target",
    "Detection Probability",
    "Detected",
    "Cq",
    "Amp Status",
    "Result",
    "Amp Score",
    "Cq Confidence",
    "Cq SD",
]

AMP_STATUS_AMP = "Amp"
AMP_STATUS_NO_AMP = "No Amp"
AMP_STATUS_INCONCLUSIVE = "Inconclusive"

RESULT_POSITIVE = "Positive"
RESULT_NEGATIVE = "Negative"
RESULT_EQUIVOCAL = "Equivocal"


# ==================== SIMULATION CONSTANTS ====================
class SimulationConstants:
    CARD_CAPACITY = 7
    PROBABILITY_CAP = 0.95
    P_INCONCLUSIVE = 0.1
    CQ_RANGE = (20.0, 35.0)
    AMP_SCORE_POSITIVE = (1.2, 2.0)
    AMP_SCORE_NEGATIVE = (0.0, 1.1)
    CQ_CONFIDENCE_POSITIVE = (0.8, 1.0)
    CQ_CONFIDENCE_NEGATIVE = (0.0, 0.5)
    CQ_SD_POSITIVE = (0.1, 1.0)
    CQ_DECIMALS = 2
    SCORE_DECIMALS = 3
    CARD_LABEL = "TAC"
    FILE_EXTENSION = "csv"
