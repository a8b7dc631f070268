"""Global configuration: constants, synonym tables, colours."""

# Generic IFC base tags that carry no useful type information on their own.
GENERIC_TYPE_TAGS = frozenset({
    "product",
    "element",
    "buildingelement",
    "ifcproduct",
    "ifcelement",
    "ifcbuildingelement",
})

# Any candidate type name starting with this prefix is an IFC class, not a name.
GENERIC_PREFIX = "ifc"

UNKNOWN_TYPE = "Unknown"

# Candidate weights for type-name resolution
WEIGHT_NESTED_TYPE_NAME = 10
WEIGHT_OBJECT_TYPE = 9
WEIGHT_TYPE_FIELD = 8
WEIGHT_TYPE_PROPERTY = 6
WEIGHT_ELEMENT_NAME = 5
MAX_LENGTH_BONUS = 3
LENGTH_BONUS_STEP = 12
MIN_CANDIDATE_LENGTH = 2

# Normalized property names accepted as a type name (besides any "*type*")
TYPE_PROPERTY_NAMES = frozenset({"reference", "typename", "familyandtype", "familytype"})

# Keys probed, in order, when a property value is wrapped in an object
VALUE_HOLDER_KEYS = ("value", "Value", "val", "Val", "NominalValue")

# Measurement synonyms (normalized form: lower-case, no accents/separators)
LENGTH_KEYS = frozenset({
    "length", "longitud", "len", "perimeter", "perimetre", "perimetro",
})
AREA_KEYS = frozenset({
    "netarea", "grossarea", "area", "superficie",
    "netsidearea", "grosssidearea", "sidearea",
    "netsurfacearea", "grosssurfacearea", "surfacearea",
    "outersurfacearea", "totalsurfacearea", "externalsurfacearea",
    "netfloorarea", "grossfloorarea",
    "footprintarea", "grossfootprintarea", "glazedarea", "projectedarea",
})
VOLUME_KEYS = frozenset({"netvolume", "grossvolume", "volume", "volumen", "volum", "vol"})
MASS_KEYS = frozenset({"mass", "netmass", "grossmass", "massa", "masa", "weight", "peso", "pes"})

# Leaf grouping ("marca") and free-text comments
TAG_PROPERTY_NAMES = frozenset({"marca", "tag", "mark"})
COMMENT_PROPERTY_NAMES = frozenset({"comentarios", "comentaris", "comments", "comment"})
NO_TAG = "__no_tag__"

# Chapter / sub-chapter classification properties for the status report
CHAPTER_KEYS = frozenset({
    "chapter", "capitol", "capitulo", "uniformat", "uniclass", "csi",
    "assemblycode", "assembly", "keynote", "notaclave", "partida",
    "capitolid", "capitolcode",
})
SUBCHAPTER_KEYS = frozenset({
    "subchapter", "subcapitol", "subcapitulo", "subcategory",
    "assemblydescription", "partidatitol", "partidatitulo",
    "subcapitolid", "subcapitolcode",
})

# Fallback chapters by IFC class prefix (lower-cased)
FALLBACK_CHAPTERS = (
    ("ifcwall", "01 · Walls"),
    ("ifcslab", "02 · Slabs / Floors"),
    ("ifcroof", "03 · Roofs"),
    ("ifcwindow", "04 · Windows"),
    ("ifcdoor", "05 · Doors"),
    ("ifccolumn", "06 · Columns"),
    ("ifcbeam", "07 · Beams"),
)
OTHER_CHAPTER = "99 · Other"
EMPTY_SUBCHAPTER = "-"

# Rendering host
DEFAULT_MODEL_PREFIX = "myModel"
DEFAULT_COLOR = (1.0, 1.0, 1.0, 1.0)
HIGHLIGHT_COLOR = (1.0, 0.95, 0.6, 1.0)   # pale yellow
ACCEPTED_COLOR = (0.6, 0.95, 0.7, 1.0)    # pale green
PENDING_COLOR = (1.0, 0.8, 0.5, 1.0)      # pale orange

# Budget codes are compared on their first three levels
BUDGET_CODE_LEVELS = 3
