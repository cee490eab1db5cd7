"""
Configuration management for the yes/no gesture engine.
"""
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass

from .types import GESTURE_TYPES


DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.default.yaml"


@dataclass
class CameraConfig:
    """Camera configuration settings."""
    index: int
    width: int
    height: int
    fps: int


@dataclass
class TrackerConfig:
    """MediaPipe FaceLandmarker configuration settings."""
    model_path: str
    num_faces: int
    min_detection_confidence: float
    min_tracking_confidence: float


@dataclass
class SessionConfig:
    """Session controller configuration."""
    default_gesture: str
    detection_interval_ms: int
    pause_after_answer: bool


@dataclass
class ConfirmationConfig:
    """Confirmation gate configuration."""
    hold_ms: int


@dataclass
class CalibrationConfig:
    """Calibration progress sequence configuration."""
    step_percent: int
    step_delay_ms: int


@dataclass
class GestureGuide:
    """User-facing description of a gesture."""
    name: str
    description: str
    yes_action: str
    no_action: str


@dataclass
class BlinkConfig:
    """Blink gesture configuration."""
    threshold: float
    min_duration_ms: int
    max_duration_ms: int
    double_signal_window_ms: int
    confirmation_delay_ms: int
    history_window_ms: int
    guide: GestureGuide


@dataclass
class SmileConfig:
    """Smile gesture configuration."""
    threshold_multiplier: float
    duration_ms: int
    guide: GestureGuide


@dataclass
class NodConfig:
    """Nod gesture configuration."""
    threshold_multiplier: float
    release_ratio: float
    cooldown_ms: int
    guide: GestureGuide


@dataclass
class WaveConfig:
    """Wave gesture configuration."""
    threshold: float
    release_ratio: float
    cooldown_ms: int
    history_size: int
    min_history: int
    guide: GestureGuide


@dataclass
class GesturesConfig:
    """Gesture recognition configuration."""
    blink: BlinkConfig
    smile: SmileConfig
    nod: NodConfig
    wave: WaveConfig


@dataclass
class DisplayConfig:
    """Display configuration settings."""
    show_landmarks: bool
    window_name: str


@dataclass
class Cfg:
    """Main configuration class."""
    camera: CameraConfig
    tracker: TrackerConfig
    session: SessionConfig
    confirmation: ConfirmationConfig
    calibration: CalibrationConfig
    gestures: GesturesConfig
    display: DisplayConfig


def load_config(path: Optional[str] = None) -> Cfg:
    """
    Load configuration from YAML file.

    Args:
        path: Path to config file. If None, uses the packaged config.default.yaml

    Returns:
        Configuration object with all settings
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f)

    return _dict_to_config(data)


def _guide(data: Dict[str, Any]) -> GestureGuide:
    return GestureGuide(
        name=data['name'],
        description=data['description'],
        yes_action=data['yes_action'],
        no_action=data['no_action']
    )


def _dict_to_config(data: Dict[str, Any]) -> Cfg:
    """Convert dictionary to configuration object."""
    camera_data = data['camera']
    camera = CameraConfig(
        index=camera_data['index'],
        width=camera_data['width'],
        height=camera_data['height'],
        fps=camera_data['fps']
    )

    tracker_data = data['tracker']
    tracker = TrackerConfig(
        model_path=tracker_data['model_path'],
        num_faces=tracker_data['num_faces'],
        min_detection_confidence=tracker_data['min_detection_confidence'],
        min_tracking_confidence=tracker_data['min_tracking_confidence']
    )

    session_data = data['session']
    session = SessionConfig(
        default_gesture=session_data['default_gesture'],
        detection_interval_ms=session_data['detection_interval_ms'],
        pause_after_answer=session_data['pause_after_answer']
    )
    if session.default_gesture not in GESTURE_TYPES:
        raise ValueError(f"Unknown default gesture: {session.default_gesture}")

    confirmation = ConfirmationConfig(hold_ms=data['confirmation']['hold_ms'])

    calibration_data = data['calibration']
    calibration = CalibrationConfig(
        step_percent=calibration_data['step_percent'],
        step_delay_ms=calibration_data['step_delay_ms']
    )
    if not 0 < calibration.step_percent <= 100:
        raise ValueError(f"calibration.step_percent must be in (0, 100]: {calibration.step_percent}")

    gestures_data = data['gestures']
    blink_data = gestures_data['blink']
    blink = BlinkConfig(
        threshold=blink_data['threshold'],
        min_duration_ms=blink_data['min_duration_ms'],
        max_duration_ms=blink_data['max_duration_ms'],
        double_signal_window_ms=blink_data['double_signal_window_ms'],
        confirmation_delay_ms=blink_data['confirmation_delay_ms'],
        history_window_ms=blink_data['history_window_ms'],
        guide=_guide(blink_data['guide'])
    )
    if blink.min_duration_ms >= blink.max_duration_ms:
        raise ValueError("gestures.blink.min_duration_ms must be below max_duration_ms")

    smile_data = gestures_data['smile']
    smile = SmileConfig(
        threshold_multiplier=smile_data['threshold_multiplier'],
        duration_ms=smile_data['duration_ms'],
        guide=_guide(smile_data['guide'])
    )
    nod_data = gestures_data['nod']
    nod = NodConfig(
        threshold_multiplier=nod_data['threshold_multiplier'],
        release_ratio=nod_data['release_ratio'],
        cooldown_ms=nod_data['cooldown_ms'],
        guide=_guide(nod_data['guide'])
    )
    wave_data = gestures_data['wave']
    wave = WaveConfig(
        threshold=wave_data['threshold'],
        release_ratio=wave_data['release_ratio'],
        cooldown_ms=wave_data['cooldown_ms'],
        history_size=wave_data['history_size'],
        min_history=wave_data['min_history'],
        guide=_guide(wave_data['guide'])
    )
    if wave.min_history > wave.history_size:
        raise ValueError("gestures.wave.min_history cannot exceed history_size")
    gestures = GesturesConfig(blink=blink, smile=smile, nod=nod, wave=wave)

    display_data = data['display']
    display = DisplayConfig(
        show_landmarks=display_data['show_landmarks'],
        window_name=display_data['window_name']
    )

    return Cfg(
        camera=camera,
        tracker=tracker,
        session=session,
        confirmation=confirmation,
        calibration=calibration,
        gestures=gestures,
        display=display
    )
