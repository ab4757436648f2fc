"""Keeps the current camera calibration and loads and saves it by URL."""

from __future__ import annotations

import logging
import os
import threading

from camcalib.camera_info import CalibrationError, CameraInfo
from camcalib.parse import read_calibration, write_calibration
from camcalib.urls import (
    DEFAULT_CAMERA_INFO_URL,
    PackageResolver,
    UrlType,
    is_valid_camera_name,
    package_file_name,
    parse_url,
    resolve_url,
)

_log = logging.getLogger(__name__)

_FILE_PREFIX_LEN = len("file://")
_FLASH_PREFIX_LEN = len("flash://")
_SAVE_FAILED = "Error storing camera calibration."


class CameraInfoManager:
    """Provides camera calibration data, loading it lazily from a URL.

    Supported URLs are ``file:///path``, ``package://name/path`` and the
    empty string, which stands for ``file://${ROS_HOME}/camera_info/${NAME}.yaml``.
    URLs may contain the ``${NAME}`` and ``${ROS_HOME}`` variables.

    Nothing is loaded until :meth:`load_camera_info`, :meth:`is_calibrated`
    or :meth:`get_camera_info` is called.
    """

    def __init__(
        self,
        camera_name: str = "camera",
        url: str = "",
        package_resolver: PackageResolver | None = None,
    ) -> None:
        self._lock = threading.Lock()
        self._camera_name = camera_name
        self._url = url
        self._package_resolver = package_resolver
        self._cam_info = CameraInfo()
        self._loaded = False

    def _ensure_loaded(self) -> None:
        with self._lock:
            if self._loaded:
                return
            # A load is being attempted now, even if it fails.
            self._loaded = True
            url = self._url
            camera_name = self._camera_name
        self._load_calibration(url, camera_name)

    def get_camera_info(self) -> CameraInfo:
        """Return a copy of the current calibration, loading it if needed.

        All matrices are zero when no calibration is available.
        """
        self._ensure_loaded()
        with self._lock:
            return self._cam_info.copy()

    def is_calibrated(self) -> bool:
        """True if the current calibration holds a camera matrix."""
        self._ensure_loaded()
        with self._lock:
            return self._cam_info.K[0] != 0.0

    def load_camera_info(self, url: str) -> bool:
        """Set a new URL and load its calibration; True if data were loaded."""
        with self._lock:
            self._url = url
            camera_name = self._camera_name
            self._loaded = True
        return self._load_calibration(url, camera_name)

    def resolve_url(self, url: str, camera_name: str) -> str:
        """Return the URL with its substitution variables resolved."""
        return resolve_url(url, camera_name)

    def set_camera_name(self, camera_name: str) -> bool:
        """Set a new camera name; False if its syntax is invalid.

        The calibration is reloaded before it is next used, since the
        name may change where the URL resolves to.
        """
        if not is_valid_camera_name(camera_name):
            return False
        with self._lock:
            self._camera_name = camera_name
            self._loaded = False
        return True

    def set_camera_info(self, camera_info: CameraInfo) -> bool:
        """Replace the current calibration without saving it."""
        with self._lock:
            self._cam_info = camera_info.copy()
            self._loaded = True
        return True

    def validate_url(self, url: str) -> bool:
        """True if the URL syntax is supported (the resource need not exist)."""
        with self._lock:
            camera_name = self._camera_name
        return parse_url(resolve_url(url, camera_name)).supported

    def handle_set_camera_info(self, camera_info: CameraInfo) -> tuple[bool, str]:
        """Store a new calibration and save it to the current URL.

        The in-memory calibration is always updated, even if saving fails.
        Returns ``(success, status_message)``.
        """
        with self._lock:
            self._cam_info = camera_info.copy()
            url = self._url
            camera_name = self._camera_name
            self._loaded = True
        if self._save_calibration(camera_info, url, camera_name):
            return True, ""
        return False, _SAVE_FAILED

    def _package_file(self, url: str) -> str | None:
        return package_file_name(url, self._package_resolver)

    def _load_calibration(self, url: str, camera_name: str) -> bool:
        resolved = resolve_url(url, camera_name)
        kind = parse_url(resolved)
        if kind is not UrlType.EMPTY:
            _log.info("camera calibration URL: %s", resolved)

        if kind is UrlType.EMPTY:
            _log.info("using default calibration URL")
            return self._load_calibration(DEFAULT_CAMERA_INFO_URL, camera_name)
        if kind is UrlType.FILE:
            return self._load_calibration_file(resolved[_FILE_PREFIX_LEN:], camera_name)
        if kind is UrlType.FLASH:
            _log.warning("reading calibration from flash is not supported")
            return False
        if kind is UrlType.PACKAGE:
            filename = self._package_file(resolved)
            if filename:
                return self._load_calibration_file(filename, camera_name)
            return False
        _log.error("Invalid camera calibration URL: %s", resolved)
        return False

    def _load_calibration_file(self, filename: str, camera_name: str) -> bool:
        _log.debug("reading camera calibration from %s", filename)
        try:
            file_camera_name, info = read_calibration(filename)
        except CalibrationError as err:
            _log.warning("Camera calibration file %s not found: %s", filename, err)
            return False
        if file_camera_name != camera_name:
            _log.warning(
                "[%s] does not match name %s in file %s",
                camera_name,
                file_camera_name,
                filename,
            )
        with self._lock:
            self._cam_info = info
        return True

    def _save_calibration(self, info: CameraInfo, url: str, camera_name: str) -> bool:
        resolved = resolve_url(url, camera_name)
        kind = parse_url(resolved)

        if kind is UrlType.EMPTY:
            return self._save_calibration(info, DEFAULT_CAMERA_INFO_URL, camera_name)
        if kind is UrlType.FILE:
            return self._save_calibration_file(
                info, resolved[_FILE_PREFIX_LEN:], camera_name
            )
        if kind is UrlType.PACKAGE:
            filename = self._package_file(resolved)
            if filename:
                return self._save_calibration_file(info, filename, camera_name)
            return False
        if kind is UrlType.FLASH:
            _log.error("flash url: %s (ignored)", resolved[_FLASH_PREFIX_LEN:])
        else:
            _log.error("invalid url: %s (ignored)", resolved)
        return self._save_calibration(info, DEFAULT_CAMERA_INFO_URL, camera_name)

    def _save_calibration_file(
        self, info: CameraInfo, filename: str, camera_name: str
    ) -> bool:
        _log.info("writing calibration data to %s", filename)
        last_slash = filename.rfind("/")
        if last_slash < 0:
            _log.error("filename [%s] has no '/'", filename)
            return False

        dirname = filename[: last_slash + 1]
        try:
            status = os.stat(dirname)
        except FileNotFoundError:
            try:
                os.makedirs(dirname, exist_ok=True)
            except OSError:
                _log.error("unable to create path to directory [%s]", dirname)
                return False
        except OSError:
            _log.error("directory [%s] not accessible", dirname)
            return False
        else:
            if not os.path.isdir(dirname) or not status:
                _log.error("[%s] is not a directory", dirname)
                return False

        try:
            write_calibration(filename, camera_name, info)
        except CalibrationError as err:
            _log.error("unable to save calibration to %s: %s", filename, err)
            return False
        return True