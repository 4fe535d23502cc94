from .logger import configure_logging, get_logger
from .audio_utils import encode_wav_bytes, read_audio_file, write_wav
from .common_utils import display_elapsed_time
from .timeline_utils import (
    format_seconds,
    print_plan,
    save_plan_to_csv,
    save_plan_to_json,
)
