import io
import logging
import time
import warnings
from pathlib import Path

import librosa
import numpy as np
import soundfile as sf

from motionsync.config import get_settings
from motionsync.domain import DecodedAudio
from motionsync.utils.logger import get_logger

logger: logging.Logger = get_logger(__name__)


def _as_frames_by_channels(samples: np.ndarray) -> np.ndarray:
    """Converts librosa's ``(channels, frames)`` layout to ``(frames, channels)``."""
    data = np.asarray(samples, dtype=np.float32)
    if data.ndim == 2:
        data = data.T
        if data.shape[1] == 1:
            data = data[:, 0]
    return np.ascontiguousarray(data)


def read_audio_file(file_path: str) -> DecodedAudio:
    """
    Decode an audio file at its native sample rate and channel layout.

    Arguments:
        file_path (str): Path to the audio file.

    Returns:
        DecodedAudio: Float32 samples, 1-D for mono or (frames, channels).

    Raises:
        IOError: If neither librosa nor soundfile can decode the file.
    """
    read_settings = get_settings().audio_read
    logger.debug(msg=f"Starting to read audio file: {file_path}")
    for attempt in range(read_settings.max_retries):
        logger.debug(msg=f"Attempt {attempt + 1} to read audio file using librosa.")
        try:
            with warnings.catch_warnings():
                warnings.filterwarnings("ignore")
                samples, sample_rate = librosa.load(file_path, sr=None, mono=False)
            logger.debug(msg=f"Successfully read audio file using librosa: {file_path}")
            return DecodedAudio(
                samples=_as_frames_by_channels(samples), sample_rate=int(sample_rate)
            )
        except Exception as err:
            logger.warning(msg=f"Librosa failed to read audio file: {err}")
            logger.warning(msg="Falling back to soundfile...")
            try:
                with sf.SoundFile(file_path) as sound_file:
                    samples = sound_file.read(dtype="float32", always_2d=False)
                    sample_rate = sound_file.samplerate
                logger.debug(
                    msg=f"Successfully read audio file using soundfile: {file_path}"
                )
                return DecodedAudio(
                    samples=np.ascontiguousarray(samples), sample_rate=int(sample_rate)
                )
            except Exception as sf_err:
                logger.warning(msg=f"Soundfile also failed: {sf_err}")
                if attempt + 1 < read_settings.max_retries:
                    logger.info(
                        msg=(
                            "Retrying with librosa in "
                            f"{read_settings.retry_delay_seconds} seconds..."
                        )
                    )
                    time.sleep(read_settings.retry_delay_seconds)

    logger.error(
        msg=(
            f"Failed to read audio file {file_path} "
            f"after {read_settings.max_retries} retries."
        )
    )
    raise IOError(f"Error reading {file_path}")


def encode_wav_bytes(audio: DecodedAudio, subtype: str = "PCM_16") -> bytes:
    """
    Encode a decoded buffer as an in-memory WAV file.

    Arguments:
        audio (DecodedAudio): Samples to encode.
        subtype (str): soundfile subtype, 16-bit PCM by default.

    Returns:
        bytes: Complete WAV file contents.
    """
    buffer = io.BytesIO()
    sf.write(buffer, audio.samples, audio.sample_rate, format="WAV", subtype=subtype)
    return buffer.getvalue()


def write_wav(audio: DecodedAudio, file_path: str, subtype: str = "PCM_16") -> str:
    """
    Write a decoded buffer to a WAV file, creating parent folders.

    Returns:
        str: The written path.
    """
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(encode_wav_bytes(audio, subtype=subtype))
    logger.info(msg=f"Wrote {audio.duration:.2f}s of audio to {path}")
    return str(path)
