"""Static word lists used by the detector, the alias generator and the decoy mixer.

Lookups are done on upper-cased text, so every set below is stored
upper-cased.  The alias pools are shared with the decoy mixer: decoys must
look exactly like the names the alias generator would produce.
"""

from __future__ import annotations


def _upper(words) -> frozenset[str]:
    return frozenset(w.upper() for w in words)


# ── Stop words (language detection + capitalization filter) ─────────

STOP_WORDS: dict[str, frozenset[str]] = {
    "fr": _upper("""
        a à afin ai aie aient ainsi alors as au aucun aucune auprès aussi autre
        autres aux avaient avais avait avant avec avez avions avoir avons ayant
        bien c ça car ce ceci cela celle celles celui cependant certains ces cet
        cette ceux chaque chez ci comme comment contre d dans de depuis des dès
        donc dont du elle elles en encore entre es est et étaient étais était
        été être eu eux fait faire fois font hors ici il ils j je jusqu jusque l
        la là le les leur leurs lors lorsque lui m ma mais me même mes moi moins
        mon n ne ni nos notre nous on ont ou où par parce pas pendant peu peut
        plus pour pourquoi qu quand que quel quelle quelles quels qui quoi sa
        sans se selon ses si sien son sont sous suis sur ta te tes toi ton tous
        tout toute toutes très tu un une vers via vos votre vous y
    """.split()),
    "en": _upper("""
        a about above after again against all am an and any are as at be
        because been before being below between both but by can could did do
        does doing down during each few for from further had has have having he
        her here hers herself him himself his how i if in into is it its itself
        just me more most my myself no nor not now of off on once only or other
        our ours ourselves out over own same she should so some such than that
        the their theirs them themselves then there these they this those
        through to too under until up very was we were what when where which
        while who whom why will with would you your yours yourself
    """.split()),
    "de": _upper("""
        aber alle allem allen aller alles als also am an ander andere anderem
        anderen anderer anderes auch auf aus bei bin bis bist da damit dann das
        dass dein deine dem den denn der des dessen dich die dies diese diesem
        diesen dieser dieses dir doch dort du durch ein eine einem einen einer
        eines er es etwas euch euer für gegen gewesen hab habe haben hat hatte
        hier hin hinter ich ihm ihn ihnen ihr ihre im in indem ins ist jede
        jedem jeden jeder jedes jetzt kann kein keine man manche mein meine mich
        mir mit muss nach nicht nichts noch nun nur ob oder ohne sehr sein seine
        sich sie sind so solche soll sondern über um und uns unser unter viel
        vom von vor war waren was weil welche wenn werde werden wie wieder will
        wir wird wo wurde wurden zu zum zur zwar zwischen
    """.split()),
}

ALL_STOP_WORDS: frozenset[str] = frozenset().union(*STOP_WORDS.values())

DEFAULT_LANGUAGE = "fr"


# ── Detection dictionaries ──────────────────────────────────────────

LEGAL_FORMS: dict[str, frozenset[str]] = {
    "fr": _upper([
        "SA", "SAS", "SASU", "SARL", "EURL", "SCI", "SNC", "SCP", "SCM",
        "SCOP", "SELARL", "SELAS", "GIE", "EI", "EIRL",
    ]),
    "uk": _upper(["Ltd", "Limited", "PLC", "LLP", "LLC", "Inc", "Corp"]),
    "de": _upper(["GmbH", "AG", "KG", "OHG", "UG", "KGaA", "eV", "GbR"]),
}

ALL_LEGAL_FORMS: frozenset[str] = frozenset().union(*LEGAL_FORMS.values())

STREET_TYPES: dict[str, frozenset[str]] = {
    "fr": _upper([
        "rue", "avenue", "av", "boulevard", "bd", "place", "chemin", "impasse",
        "allée", "quai", "cours", "route", "square", "passage", "faubourg",
        "lieu-dit", "résidence",
    ]),
    "en": _upper([
        "street", "st", "road", "rd", "avenue", "ave", "lane", "drive", "way",
        "close", "court", "crescent", "terrace",
    ]),
    "de": _upper(["straße", "strasse", "str", "weg", "platz", "allee", "gasse", "ring"]),
}

ALL_STREET_TYPES: frozenset[str] = frozenset().union(*STREET_TYPES.values())

HONORIFICS: dict[str, frozenset[str]] = {
    "fr": _upper(["M", "MR", "MME", "MLLE", "DR", "ME", "PR"]),
    "en": _upper(["MR", "MRS", "MS", "MISS", "DR", "PROF", "SIR", "LADY"]),
    "de": _upper(["HERR", "FRAU", "DR", "PROF"]),
}

ALL_HONORIFICS: frozenset[str] = frozenset().union(*HONORIFICS.values())


# ── Alias pools (also the decoy source) ─────────────────────────────

FIRST_NAMES: dict[str, tuple[str, ...]] = {
    "M": (
        "Antoine", "Baptiste", "Clément", "Damien", "Étienne", "Fabien",
        "Guillaume", "Hugo", "Julien", "Laurent", "Mathieu", "Nicolas",
        "Olivier", "Pascal", "Romain", "Sébastien", "Thomas", "Vincent",
        "Oliver", "George", "Henry", "Lukas", "Felix", "Jonas",
    ),
    "F": (
        "Amélie", "Brigitte", "Céline", "Delphine", "Élodie", "Florence",
        "Hélène", "Isabelle", "Juliette", "Laure", "Mathilde", "Nathalie",
        "Pauline", "Sandrine", "Sophie", "Valérie", "Virginie", "Zoé",
        "Amelia", "Olivia", "Emily", "Hannah", "Lena", "Clara",
    ),
    "neutral": ("Camille", "Dominique", "Claude", "Alix", "Charlie", "Sacha"),
}

ALL_FIRST_NAMES: tuple[str, ...] = FIRST_NAMES["M"] + FIRST_NAMES["F"] + FIRST_NAMES["neutral"]
GENDERED_FIRST_NAMES: tuple[str, ...] = FIRST_NAMES["M"] + FIRST_NAMES["F"]

SURNAMES: tuple[str, ...] = (
    "Bernard", "Petit", "Robert", "Richard", "Moreau", "Laurent", "Simon",
    "Michel", "Lefebvre", "Leroy", "Roux", "David", "Bertrand", "Morel",
    "Fournier", "Girard", "Bonnet", "Lambert", "Fontaine", "Rousseau",
    "Vincent", "Muller", "Lefevre", "Faure", "Andre", "Mercier", "Blanc",
    "Guerin", "Boyer", "Garnier", "Chevalier", "Francois", "Legrand",
    "Gauthier", "Perrin", "Robin", "Clement", "Morin", "Nicolas", "Henry",
    "Roussel", "Mathieu", "Gautier", "Masson", "Marchand", "Renaud",
    "Walker", "Hughes", "Carter", "Fischer", "Weber", "Becker",
)

COMPANY_PARTS: dict[str, tuple[str, ...]] = {
    "standalone": (
        "Horizon", "Atlas", "Boréal", "Cèdre", "Azur", "Zénith", "Orion",
        "Vega", "Altitude", "Équinoxe", "Helios", "Sirius", "Kappa", "Nova",
        "Tilia", "Aubépine", "Cassiopée", "Meridian",
    ),
    "prefixes": (
        "Groupe", "Société", "Atelier", "Cabinet", "Compagnie", "Maison",
        "Bureau", "Études", "Holding", "Conseil",
    ),
    "suffixes": (
        "Horizon", "Atlas", "Boréal", "Azur", "Zénith", "Orion", "Vega",
        "des Tilleuls", "du Levant", "de l'Ouest", "Méridien", "Nova",
    ),
}

CITY_POOL: tuple[str, ...] = (
    "Bordeaux", "Nantes", "Strasbourg", "Montpellier", "Rennes", "Lille",
    "Reims", "Toulon", "Grenoble", "Dijon", "Angers", "Clermont-Ferrand",
    "Brest", "Tours", "Amiens", "Metz", "Perpignan", "Orléans", "Caen",
    "Rouen", "Manchester", "Birmingham", "Bristol", "Leeds", "Glasgow",
    "Munich", "Hamburg", "Cologne", "Frankfurt", "Stuttgart",
)

ALIAS_STREET_TYPES: tuple[str, ...] = ("rue", "avenue", "boulevard", "place", "chemin")

ALIAS_STREET_NAMES: tuple[str, ...] = (
    "des Tilleuls", "du Commerce", "Victor Hugo", "de la Paix", "Jean Jaurès",
    "Pasteur", "Gambetta", "de la Gare", "des Lilas", "du Marché",
    "de la République",
)

EMAIL_DOMAINS: tuple[str, ...] = ("email.fr", "courrier.net", "boite.org", "exemple.com")
