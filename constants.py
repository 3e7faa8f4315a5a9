import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8080))

DOMAIN = os.getenv("NGROK_URL") or os.getenv("DOMAIN", "localhost")

# WebSocket the voice platform connects to
SPEECH_WS_URL = f"ws://localhost:{PORT}/ws" if DOMAIN == "localhost" else f"wss://{DOMAIN}/ws"

GREETING = os.getenv("GREETING", "Welcome to the Pictionary Hotline! Say a theme to start a round, or say random.")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", None)
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", None)
WORD_MODEL = os.getenv("WORD_MODEL", "gpt-4o-mini")
WORD_SOURCE_TIMEOUT_SEC = float(os.getenv("WORD_SOURCE_TIMEOUT_SEC", 5))

ROOM_CODE_LENGTH = min(6, max(4, int(os.getenv("ROOM_CODE_LENGTH", 4))))

FALLBACK_WORDS = [
    "apple", "bicycle", "castle", "dinosaur", "elephant", "guitar",
    "helicopter", "igloo", "kite", "lighthouse", "mountain", "octopus",
    "pineapple", "rainbow", "snowman", "umbrella", "volcano", "windmill",
]

QUIT_WORDS = ("quit", "exit")

FAREWELL_TEXT = "Thanks for playing. Goodbye!"
ROUND_START_TEXT = "Okay, the theme is {theme}. The drawer has the word, start guessing whenever you are ready."
CORRECT_TEXT = "Correct! The word was {word}. Say another theme to play again, or say quit to hang up."
TRY_AGAIN_TEXT = "Not quite, try again!"
