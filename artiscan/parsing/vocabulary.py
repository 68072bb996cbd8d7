"""
Closed vocabularies for detail-pane text: stat names, artifact pieces
and the rules that tie main stats to slots.
"""

from enum import Enum
from typing import Dict, FrozenSet, NamedTuple, Tuple


class StatKind(Enum):
    """Stat kinds, valued by their GOOD export key."""
    HP = "hp"
    HP_PERCENT = "hp_"
    ATK = "atk"
    ATK_PERCENT = "atk_"
    DEF = "def"
    DEF_PERCENT = "def_"
    ELEMENTAL_MASTERY = "eleMas"
    ENERGY_RECHARGE = "enerRech_"
    CRIT_RATE = "critRate_"
    CRIT_DMG = "critDMG_"
    HEALING_BONUS = "heal_"
    PYRO_DMG = "pyro_dmg_"
    ELECTRO_DMG = "electro_dmg_"
    HYDRO_DMG = "hydro_dmg_"
    ANEMO_DMG = "anemo_dmg_"
    GEO_DMG = "geo_dmg_"
    CRYO_DMG = "cryo_dmg_"
    DENDRO_DMG = "dendro_dmg_"
    PHYSICAL_DMG = "physical_dmg_"

    @property
    def is_percent(self) -> bool:
        return self.value.endswith("_")


class Slot(Enum):
    """Artifact slots, valued by their GOOD export key."""
    FLOWER = "flower"
    PLUME = "plume"
    SANDS = "sands"
    GOBLET = "goblet"
    CIRCLET = "circlet"


# Display name -> (kind when the value is flat, kind when it ends in %)
STAT_NAMES: Dict[str, Tuple[StatKind, StatKind]] = {
    "HP": (StatKind.HP, StatKind.HP_PERCENT),
    "ATK": (StatKind.ATK, StatKind.ATK_PERCENT),
    "DEF": (StatKind.DEF, StatKind.DEF_PERCENT),
    "Elemental Mastery": (StatKind.ELEMENTAL_MASTERY, StatKind.ELEMENTAL_MASTERY),
    "Energy Recharge": (StatKind.ENERGY_RECHARGE, StatKind.ENERGY_RECHARGE),
    "CRIT Rate": (StatKind.CRIT_RATE, StatKind.CRIT_RATE),
    "CRIT DMG": (StatKind.CRIT_DMG, StatKind.CRIT_DMG),
    "Healing Bonus": (StatKind.HEALING_BONUS, StatKind.HEALING_BONUS),
    "Pyro DMG Bonus": (StatKind.PYRO_DMG, StatKind.PYRO_DMG),
    "Electro DMG Bonus": (StatKind.ELECTRO_DMG, StatKind.ELECTRO_DMG),
    "Hydro DMG Bonus": (StatKind.HYDRO_DMG, StatKind.HYDRO_DMG),
    "Anemo DMG Bonus": (StatKind.ANEMO_DMG, StatKind.ANEMO_DMG),
    "Geo DMG Bonus": (StatKind.GEO_DMG, StatKind.GEO_DMG),
    "Cryo DMG Bonus": (StatKind.CRYO_DMG, StatKind.CRYO_DMG),
    "Dendro DMG Bonus": (StatKind.DENDRO_DMG, StatKind.DENDRO_DMG),
    "Physical DMG Bonus": (StatKind.PHYSICAL_DMG, StatKind.PHYSICAL_DMG),
}

_COMMON_MAIN = frozenset({
    StatKind.HP_PERCENT, StatKind.ATK_PERCENT, StatKind.DEF_PERCENT, StatKind.ELEMENTAL_MASTERY,
})

ALLOWED_MAIN_STATS: Dict[Slot, FrozenSet[StatKind]] = {
    Slot.FLOWER: frozenset({StatKind.HP}),
    Slot.PLUME: frozenset({StatKind.ATK}),
    Slot.SANDS: _COMMON_MAIN | {StatKind.ENERGY_RECHARGE},
    Slot.GOBLET: _COMMON_MAIN | {
        StatKind.PYRO_DMG, StatKind.ELECTRO_DMG, StatKind.HYDRO_DMG, StatKind.ANEMO_DMG,
        StatKind.GEO_DMG, StatKind.CRYO_DMG, StatKind.DENDRO_DMG, StatKind.PHYSICAL_DMG,
    },
    Slot.CIRCLET: _COMMON_MAIN | {StatKind.CRIT_RATE, StatKind.CRIT_DMG, StatKind.HEALING_BONUS},
}

ALLOWED_SUB_STATS: FrozenSet[StatKind] = frozenset({
    StatKind.HP, StatKind.HP_PERCENT, StatKind.ATK, StatKind.ATK_PERCENT,
    StatKind.DEF, StatKind.DEF_PERCENT, StatKind.ELEMENTAL_MASTERY,
    StatKind.ENERGY_RECHARGE, StatKind.CRIT_RATE, StatKind.CRIT_DMG,
})


class ArtifactSet(NamedTuple):
    key: str            # GOOD set key
    mona_name: str
    pieces: Dict[Slot, str]


_SLOT_ORDER = (Slot.FLOWER, Slot.PLUME, Slot.SANDS, Slot.GOBLET, Slot.CIRCLET)

# GOOD key, Mona key, then piece names in flower, plume, sands, goblet, circlet order
_SET_TABLE = (
    # Sets up to 4 stars
    ("Berserker", "berserker",
     "Berserker's Rose", "Berserker's Indigo Feather", "Berserker's Timepiece",
     "Berserker's Bone Goblet", "Berserker's Battle Mask"),
    ("BraveHeart", "braveHeart",
     "Medal of the Brave", "Prospect of the Brave", "Fortitude of the Brave",
     "Outset of the Brave", "Crown of the Brave"),
    ("DefendersWill", "defenderWill",
     "Guardian's Flower", "Guardian's Sigil", "Guardian's Clock",
     "Guardian's Vessel", "Guardian's Band"),
    ("Gambler", "gambler",
     "Gambler's Brooch", "Gambler's Feather Accessory", "Gambler's Pocket Watch",
     "Gambler's Dice Cup", "Gambler's Earrings"),
    ("Instructor", "instructor",
     "Instructor's Brooch", "Instructor's Feather Accessory", "Instructor's Pocket Watch",
     "Instructor's Tea Cup", "Instructor's Cap"),
    ("MartialArtist", "martialArtist",
     "Martial Artist's Red Flower", "Martial Artist's Feather Accessory",
     "Martial Artist's Water Hourglass", "Martial Artist's Wine Cup", "Martial Artist's Bandana"),
    ("ResolutionOfSojourner", "resolutionOfSojourner",
     "Heart of Comradeship", "Feather of Homecoming", "Sundial of the Sojourner",
     "Goblet of the Sojourner", "Crown of Parting"),
    ("Scholar", "scholar",
     "Scholar's Bookmark", "Scholar's Quill Pen", "Scholar's Clock",
     "Scholar's Ink Cup", "Scholar's Lens"),
    ("TheExile", "exile",
     "Exile's Flower", "Exile's Feather", "Exile's Pocket Watch",
     "Exile's Goblet", "Exile's Circlet"),
    ("TinyMiracle", "tinyMiracle",
     "Tiny Miracle's Flower", "Tiny Miracle's Feather", "Tiny Miracle's Hourglass",
     "Tiny Miracle's Goblet", "Tiny Miracle's Earrings"),

    # 5 star sets
    ("ArchaicPetra", "archaicPetra",
     "Flower of Creviced Cliff", "Feather of Jagged Peaks", "Sundial of Enduring Jade",
     "Goblet of Chiseled Crag", "Mask of Solitude Basalt"),
    ("BlizzardStrayer", "blizzardStrayer",
     "Snowswept Memory", "Icebreaker's Resolve", "Frozen Homeland's Demise",
     "Frost-Weaved Dignity", "Broken Rime's Echo"),
    ("BloodstainedChivalry", "bloodstainedChivalry",
     "Bloodstained Flower of Iron", "Bloodstained Black Plume", "Bloodstained Final Hour",
     "Bloodstained Chevalier's Goblet", "Bloodstained Iron Mask"),
    ("CrimsonWitchOfFlames", "crimsonWitch",
     "Witch's Flower of Blaze", "Witch's Ever-Burning Plume", "Witch's End Time",
     "Witch's Heart Flames", "Witch's Scorching Hat"),
    ("DeepwoodMemories", "deepwoodMemories",
     "Labyrinth Wayfarer", "Scholar of Vines", "A Time of Insight",
     "Lamp of the Lost", "Laurel Coronet"),
    ("DesertPavilionChronicle", "desertPavilionChronicle",
     "The First Days of the City of Kings", "End of the Golden Realm",
     "Timepiece of the Lost Path", "Defender of the Enchanting Dream",
     "Legacy of the Desert High-Born"),
    ("EchoesOfAnOffering", "echoesOfAnOffering",
     "Soulscent Bloom", "Jade Leaf", "Symbol of Felicitation",
     "Chalice of the Font", "Flowing Rings"),
    ("EmblemOfSeveredFate", "emblemOfSeveredFate",
     "Magnificent Tsuba", "Sundered Feather", "Storm Cage",
     "Scarlet Vessel", "Ornate Kabuto"),
    ("FlowerOfParadiseLost", "flowerOfParadiseLost",
     "Ay-Khanoum's Myriad", "Wilting Feast", "A Moment Congealed",
     "Secret-Keeper's Magic Bottle", "Amethyst Crown"),
    ("FragmentOfHarmonicWhimsy", "fragmentOfHarmonicWhimsy",
     "Harmonious Symphony Prelude", "Ancient Sea's Nocturnal Musing",
     "The Grand Jape of the Turning of Fate", "Ichor Shower Rhapsody",
     "Whimsical Dance of the Withered"),
    ("GildedDreams", "gildedDreams",
     "Dreaming Steelbloom", "Feather of Judgment", "The Sunken Years",
     "Honeyed Final Feast", "Shadow of the Sand King"),
    ("GladiatorsFinale", "gladiatorFinale",
     "Gladiator's Nostalgia", "Gladiator's Destiny", "Gladiator's Longing",
     "Gladiator's Intoxication", "Gladiator's Triumphus"),
    ("GoldenTroupe", "goldenTroupe",
     "Golden Song's Variation", "Golden Bird's Shedding", "Golden Era's Prelude",
     "Golden Night's Bustle", "Golden Troupe's Reward"),
    ("HeartOfDepth", "heartOfDepth",
     "Gilded Corsage", "Gust of Nostalgia", "Copper Compass",
     "Goblet of Thundering Deep", "Wine-Stained Tricorne"),
    ("HuskOfOpulentDreams", "huskOfOpulentDreams",
     "Bloom Times", "Plume of Luxury", "Song of Life",
     "Calabash of Awakening", "Skeletal Hat"),
    ("Lavawalker", "lavaWalker",
     "Lavawalker's Resolution", "Lavawalker's Salvation", "Lavawalker's Torment",
     "Lavawalker's Epiphany", "Lavawalker's Wisdom"),
    ("MaidenBeloved", "maidenBeloved",
     "Maiden's Distant Love", "Maiden's Heart-stricken Infatuation", "Maiden's Passing Youth",
     "Maiden's Fleeting Leisure", "Maiden's Fading Beauty"),
    ("MarechausseeHunter", "marechausseeHunter",
     "Hunter's Brooch", "Masterpiece's Overture", "Moment of Judgment",
     "Forgotten Vessel", "Veteran's Visage"),
    ("NighttimeWhispersInTheEchoingWoods", "nighttimeWhispersInTheEchoingWoods",
     "Selfless Floral Accessory", "Honest Quill", "Faithful Hourglass",
     "Magnanimous Ink Bottle", "Compassionate Ladies' Hat"),
    ("NoblesseOblige", "noblesseOblige",
     "Royal Flora", "Royal Plume", "Royal Pocket Watch",
     "Royal Silver Urn", "Royal Masque"),
    ("NymphsDream", "nymphsDream",
     "Odyssean Flower", "Wicked Mage's Plumule", "Nymph's Constancy",
     "Heroes' Tea Party", "Fell Dragon's Monocle"),
    ("ObsidianCodex", "obsidianCodex",
     "Reckoning of the Xenogenic", "Root of the Spirit-Marrow", "Myths of the Night Realm",
     "Pre-Banquet of the Contenders", "Crown of the Saints"),
    ("OceanHuedClam", "oceanHuedClam",
     "Sea-Dyed Blossom", "Deep Palace's Plume", "Cowry of Parting",
     "Pearl Cage", "Crown of Watatsumi"),
    ("PaleFlame", "paleFlame",
     "Stainless Bloom", "Wise Doctor's Pinion", "Moment of Cessation",
     "Surpassing Cup", "Mocking Mask"),
    ("RetracingBolide", "retracingBolide",
     "Summer Night's Bloom", "Summer Night's Finale", "Summer Night's Moment",
     "Summer Night's Waterballoon", "Summer Night's Mask"),
    ("ScrollOfTheHeroOfCinderCity", "scrollOfTheHeroOfCinderCity",
     "Beast Tamer's Talisman", "Mountain Ranger's Marker", "Mystic's Gold Dial",
     "Wandering Scholar's Claw Cup", "Demon-Warrior's Feather Mask"),
    ("ShimenawasReminiscence", "shimenawaReminiscence",
     "Entangling Bloom", "Shaft of Remembrance", "Morning Dew's Moment",
     "Hopeful Heart", "Capricious Visage"),
    ("SongOfDaysPast", "songOfDaysPast",
     "Forgotten Oath of Calm", "Recollection of Days Past", "Echoing Sound From Days Past",
     "Beauty of Days Past", "Poetry of Days Past"),
    ("TenacityOfTheMillelith", "tenacityOfTheMillelith",
     "Flower of Accolades", "Ceremonial War-Plume", "Orichalceous Time-Dial",
     "Noble's Pledging Vessel", "General's Ancient Helm"),
    ("Thundersoother", "thunderSmoother",
     "Thundersoother's Heart", "Thundersoother's Plume", "Hour of Soothing Thunder",
     "Thundersoother's Goblet", "Thundersoother's Diadem"),
    ("ThunderingFury", "thunderingFury",
     "Thunderbird's Mercy", "Survivor of Catastrophe", "Hourglass of Thunder",
     "Omen of Thunderstorm", "Thunder Summoner's Crown"),
    ("UnfinishedReverie", "unfinishedReverie",
     "Dark Fruit of Bright Flowers", "Faded Emerald Tail", "Moment of Attainment",
     "The Wine-Flask Over Which the Plan Was Hatched", "Crownless Crown"),
    ("VermillionHereafter", "vermillionHereafter",
     "Flowering Life", "Feather of Nascent Light", "Solar Relic",
     "Moment of the Pact", "Thundering Poise"),
    ("ViridescentVenerer", "viridescentVenerer",
     "In Remembrance of Viridescent Fields", "Viridescent Arrow Feather",
     "Viridescent Venerer's Determination", "Viridescent Venerer's Vessel",
     "Viridescent Venerer's Diadem"),
    ("VourukashasGlow", "vourukashasGlow",
     "Stamen of Khvarena's Origin", "Vibrant Pinion", "Ancient Abscission",
     "Feast of Boundless Joy", "Heart of Khvarena's Brilliance"),
    ("WanderersTroupe", "wandererTroupe",
     "Troupe's Dawnlight", "Bard's Arrow Feather", "Concert's Final Hour",
     "Wanderer's String-Kettle", "Conductor's Top Hat"),
)

ARTIFACT_SETS: Tuple[ArtifactSet, ...] = tuple(
    ArtifactSet(key, mona_name, dict(zip(_SLOT_ORDER, pieces)))
    for key, mona_name, *pieces in _SET_TABLE
)

# Piece name -> (set, slot)
PIECE_NAMES: Dict[str, Tuple[ArtifactSet, Slot]] = {
    piece: (artifact_set, slot)
    for artifact_set in ARTIFACT_SETS
    for slot, piece in artifact_set.pieces.items()
}

SETS_BY_KEY: Dict[str, ArtifactSet] = {s.key: s for s in ARTIFACT_SETS}
