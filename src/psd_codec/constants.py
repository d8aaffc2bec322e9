"""
Various constants for psd_codec
"""

from enum import Enum, IntEnum


class ColorMode(IntEnum):
    """
    Color mode.
    """

    BITMAP = 0
    GRAYSCALE = 1
    INDEXED = 2
    RGB = 3
    CMYK = 4
    MULTICHANNEL = 7
    DUOTONE = 8
    LAB = 9

    @staticmethod
    def channels(value: "ColorMode", alpha: bool = False) -> int:
        """Intrinsic number of color channels, optionally counting alpha."""
        return {
            ColorMode.BITMAP: 1,
            ColorMode.GRAYSCALE: 1,
            ColorMode.INDEXED: 1,
            ColorMode.RGB: 3,
            ColorMode.CMYK: 4,
            ColorMode.MULTICHANNEL: 3,
            ColorMode.DUOTONE: 1,
            ColorMode.LAB: 3,
        }[ColorMode(value)] + int(alpha)


class Compression(IntEnum):
    """
    Compression modes.

    Compression. 0 = Raw Data, 1 = RLE compressed, 2 = ZIP without prediction,
    3 = ZIP with prediction.
    """

    RAW = 0
    RLE = 1
    ZIP = 2
    ZIP_WITH_PREDICTION = 3


class ChannelID(IntEnum):
    """
    Channel types.
    """

    CHANNEL_0 = 0  # Red, Cyan, Gray, ...
    CHANNEL_1 = 1  # Green, Magenta, ...
    CHANNEL_2 = 2  # Blue, Yellow, ...
    CHANNEL_3 = 3  # Black, ...
    CHANNEL_4 = 4
    CHANNEL_5 = 5
    CHANNEL_6 = 6
    CHANNEL_7 = 7
    CHANNEL_8 = 8
    CHANNEL_9 = 9
    TRANSPARENCY_MASK = -1
    USER_LAYER_MASK = -2
    REAL_USER_LAYER_MASK = -3


class Clipping(IntEnum):
    """Clipping."""

    BASE = 0
    NON_BASE = 1


class BlendMode(Enum):
    """
    Blend mode keys.

    Layer records keep the raw 4-byte key, so keys that are not listed here
    still round-trip.
    """

    PASS_THROUGH = b"pass"
    NORMAL = b"norm"
    DISSOLVE = b"diss"
    DARKEN = b"dark"
    MULTIPLY = b"mul "
    COLOR_BURN = b"idiv"
    LINEAR_BURN = b"lbrn"
    DARKER_COLOR = b"dkCl"
    LIGHTEN = b"lite"
    SCREEN = b"scrn"
    COLOR_DODGE = b"div "
    LINEAR_DODGE = b"lddg"
    LIGHTER_COLOR = b"lgCl"
    OVERLAY = b"over"
    SOFT_LIGHT = b"sLit"
    HARD_LIGHT = b"hLit"
    VIVID_LIGHT = b"vLit"
    LINEAR_LIGHT = b"lLit"
    PIN_LIGHT = b"pLit"
    HARD_MIX = b"hMix"
    DIFFERENCE = b"diff"
    EXCLUSION = b"smud"
    SUBTRACT = b"fsub"
    DIVIDE = b"fdiv"
    HUE = b"hue "
    SATURATION = b"sat "
    COLOR = b"colr"
    LUMINOSITY = b"lum "


class SectionDivider(IntEnum):
    """Layer section marker kinds."""

    OTHER = 0
    OPEN_FOLDER = 1
    CLOSED_FOLDER = 2
    BOUNDING_SECTION_DIVIDER = 3


class Resource(IntEnum):
    """
    Image resource keys.

    Only ids that psd_codec interprets, or that are common enough to be worth
    naming in logs, are defined. Anything else is kept as raw bytes.
    """

    RESOLUTION_INFO = 1005
    ALPHA_NAMES_PASCAL = 1006
    CAPTION_PASCAL = 1008
    BACKGROUND_COLOR = 1010
    PRINT_FLAGS = 1011
    LAYER_STATE_INFO = 1024
    LAYER_GROUP_INFO = 1026
    IPTC_NAA = 1028
    GRID_AND_GUIDES_INFO = 1032
    THUMBNAIL_RESOURCE_PS4 = 1033
    COPYRIGHT_FLAG = 1034
    THUMBNAIL_RESOURCE = 1036
    GLOBAL_ANGLE = 1037
    ICC_PROFILE = 1039
    ICC_UNTAGGED_PROFILE = 1041
    IDS_SEED_NUMBER = 1044
    ALPHA_NAMES_UNICODE = 1045
    GLOBAL_ALTITUDE = 1049
    SLICES = 1050
    ALPHA_IDENTIFIERS = 1053
    URL_LIST = 1054
    VERSION_INFO = 1057
    EXIF_DATA_1 = 1058
    XMP_METADATA = 1060
    PRINT_SCALE = 1062
    PIXEL_ASPECT_RATIO = 1064
    LAYER_SELECTION_IDS = 1069
    PRINT_INFO_CS2 = 1071
    LAYER_GROUPS_ENABLED_ID = 1072
    DISPLAY_INFO = 1077
    PRINT_INFO_CS5 = 1082
    PRINT_STYLE = 1083

    @staticmethod
    def is_path_info(value: int) -> bool:
        return 2000 <= value and value <= 2997

    @staticmethod
    def is_plugin_resource(value: int) -> bool:
        return 4000 <= value and value <= 4999


class Tag(Enum):
    """Additional-info record keys."""

    UNICODE_LAYER_NAME = b"luni"
    SECTION_DIVIDER_SETTING = b"lsct"
    NESTED_SECTION_DIVIDER_SETTING = b"lsdk"
    LAYER_ID = b"lyid"
    # Keys below use 8-byte lengths in the large-document variant.
    ALPHA = b"Alph"
    ARTBOARD_DATA2 = b"artd"
    COMPOSITOR_INFO = b"cinf"
    EXPORT_SETTING1 = b"extd"
    EXPORT_SETTING2 = b"extn"
    FILTER_EFFECTS1 = b"FXid"
    FILTER_EFFECTS2 = b"FEid"
    FILTER_EFFECTS3 = b"FELS"
    FILTER_MASK = b"FMsk"
    LAYER = b"Layr"
    LAYER_16 = b"Lr16"
    LAYER_32 = b"Lr32"
    LINKED_LAYER2 = b"lnk2"
    LINKED_LAYER3 = b"lnk3"
    LINKED_LAYER_EXTERNAL = b"lnkE"
    PIXEL_SOURCE_DATA2 = b"PxSD"
    SAVING_MERGED_TRANSPARENCY = b"Mtrn"
    SAVING_MERGED_TRANSPARENCY16 = b"Mt16"
    SAVING_MERGED_TRANSPARENCY32 = b"Mt32"
    UNICODE_PATH_NAME = b"pths"
    USER_MASK = b"LMsk"
