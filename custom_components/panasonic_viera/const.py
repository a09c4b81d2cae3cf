"""Constants for Panasonic Viera integration."""

from homeassistant.const import Platform

DOMAIN = "panasonic_viera"

CONF_HOST = "host"
CONF_NAME = "name"
CONF_APP_ID = "app_id"
CONF_ENCRYPTION_KEY = "encryption_key"
CONF_PAIR = "pair"
CONF_PIN = "pin"

DEFAULT_NAME = "Panasonic Viera TV"
DEFAULT_PORT = 55000
DEFAULT_TIMEOUT = 5.0
DEFAULT_PROBE_TIMEOUT = 2.0
DEFAULT_POLL_INTERVAL = 60

# Remote control key codes, sent as NRC_{code}-ONOFF
VIERA_KEYS: dict[str, str] = {
    "thirty_second_skip": "30S_SKIP",
    "toggle_3d": "3D",
    "apps": "APPS",
    "aspect": "ASPECT",
    "back": "BACK",
    "blue": "BLUE",
    "cancel": "CANCEL",
    "cc": "CC",
    "chat_mode": "CHAT",
    "ch_down": "CH_DOWN",
    "input_key": "CHG_INPUT",
    "network": "CHG_NETWORK",
    "ch_up": "CH_UP",
    "num_0": "D0",
    "num_1": "D1",
    "num_2": "D2",
    "num_3": "D3",
    "num_4": "D4",
    "num_5": "D5",
    "num_6": "D6",
    "num_7": "D7",
    "num_8": "D8",
    "num_9": "D9",
    "diga_control": "DIGA_CTL",
    "display": "DISP_MODE",
    "down": "DOWN",
    "enter": "ENTER",
    "epg": "EPG",
    "exit": "EXIT",
    "ez_sync": "EZ_SYNC",
    "favorite": "FAVORITE",
    "fast_forward": "FF",
    "game": "GAME",
    "green": "GREEN",
    "guide": "GUIDE",
    "hold": "HOLD",
    "home": "HOME",
    "index": "INDEX",
    "info": "INFO",
    "connect": "INTERNET",
    "left": "LEFT",
    "menu": "MENU",
    "mpx": "MPX",
    "mute": "MUTE",
    "net_bs": "NET_BS",
    "net_cs": "NET_CS",
    "net_td": "NET_TD",
    "off_timer": "OFFTIMER",
    "pause": "PAUSE",
    "pictai": "PICTAI",
    "play": "PLAY",
    "p_nr": "P_NR",
    "power": "POWER",
    "program": "PROG",
    "record": "REC",
    "red": "RED",
    "return_key": "RETURN",
    "rewind": "REW",
    "right": "RIGHT",
    "r_screen": "R_SCREEN",
    "last_view": "R_TUNE",
    "sap": "SAP",
    "toggle_sd_card": "SD_CARD",
    "skip_next": "SKIP_NEXT",
    "skip_prev": "SKIP_PREV",
    "split": "SPLIT",
    "stop": "STOP",
    "subtitles": "STTL",
    "option": "SUBMENU",
    "surround": "SURROUND",
    "swap": "SWAP",
    "text": "TEXT",
    "tv": "TV",
    "up": "UP",
    "link": "VIERA_LINK",
    "volume_down": "VOLDOWN",
    "volume_up": "VOLUP",
    "vtools": "VTOOLS",
    "yellow": "YELLOW",
}

# Platforms supported by this integration
PLATFORMS: list[Platform] = [
    Platform.MEDIA_PLAYER,
    Platform.REMOTE,
    Platform.BUTTON,
    Platform.SENSOR,
]

# SOAP core constants
SOAP_BASE_URL = "http://{host}:{port}{path}"
SOAP_ENVELOPE_NS = "http://schemas.xmlsoap.org/soap/envelope/"
SOAP_ENCODING_NS = "http://schemas.xmlsoap.org/soap/encoding/"

URL_CONTROL_NRC = "/nrc/control_0"
URL_CONTROL_DMR = "/dmr/control_0"

URN_REMOTE_CONTROL = "panasonic-com:service:p00NetworkControl:1"
URN_RENDERING_CONTROL = "schemas-upnp-org:service:RenderingControl:1"

# Vendor actions on the network control endpoint
ACTION_SEND_KEY = "X_SendKey"
ACTION_DISPLAY_PIN_CODE = "X_DisplayPinCode"
ACTION_REQUEST_AUTH = "X_RequestAuth"
ACTION_GET_SESSION_ID = "X_GetEncryptSessionId"
ACTION_ENCRYPTED_COMMAND = "X_EncryptedCommand"
