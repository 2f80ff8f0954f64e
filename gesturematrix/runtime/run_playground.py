from __future__ import annotations

import time

import cv2
import numpy as np

from gesturematrix.core.config import DEFAULT_PRESET, Preset
from gesturematrix.core.matrix import decompose
from gesturematrix.interpreter.focal import make_focal_resolver
from gesturematrix.interpreter.state_machine import GestureSession
from gesturematrix.runtime.driver import GestureDriver
from gesturematrix.runtime.mouse_source import MouseGestureSource
from gesturematrix.runtime.profile import apply_profile, load_profile

WINDOW = "GestureMatrix Playground"


def _pattern(w: int, h: int, step: int = 40) -> np.ndarray:
    img = np.full((h, w, 3), 24, dtype=np.uint8)
    for x in range(0, w, step):
        cv2.line(img, (x, 0), (x, h - 1), (70, 70, 70), 1)
    for y in range(0, h, step):
        cv2.line(img, (0, y), (w - 1, y), (70, 70, 70), 1)
    cv2.rectangle(img, (w // 4, h // 4), (3 * w // 4, 3 * h // 4), (0, 180, 255), 2)
    cv2.putText(img, "GestureMatrix", (w // 4 + 12, h // 2), cv2.FONT_HERSHEY_SIMPLEX, 1.0, (230, 230, 230), 2)
    return img


def render(pattern: np.ndarray, matrix: np.ndarray, clip: bool = True) -> np.ndarray:
    h, w = pattern.shape[:2]
    # 2x3 affine part of the 4x4 homogeneous matrix
    m = matrix[[0, 1]][:, [0, 1, 3]].astype(np.float32)
    border = cv2.BORDER_CONSTANT if clip else cv2.BORDER_WRAP
    return cv2.warpAffine(pattern, m, (w, h), flags=cv2.INTER_LINEAR, borderMode=border)


def main(preset: Preset = DEFAULT_PRESET, size=(960, 640)) -> None:
    preset = apply_profile(preset, load_profile())
    w, h = size
    session = GestureSession(preset, focal_resolver=make_focal_resolver(preset.gestures, size=size))
    driver = GestureDriver(session, verbose=True)
    mouse = MouseGestureSource(driver)
    pattern = _pattern(w, h)

    def on_mouse(event, x, y, flags, param):
        t_ms = int(time.time() * 1000)
        if event == cv2.EVENT_LBUTTONDOWN:
            mouse.left_down(x, y, t_ms)
        elif event == cv2.EVENT_RBUTTONDOWN:
            mouse.right_down(x, y, t_ms)
        elif event == cv2.EVENT_MOUSEMOVE:
            mouse.move(x, y, t_ms)
        elif event == cv2.EVENT_LBUTTONUP:
            mouse.left_up(x, y, t_ms)
        elif event == cv2.EVENT_RBUTTONUP:
            mouse.right_up(x, y, t_ms)

    cv2.namedWindow(WINDOW)
    cv2.setMouseCallback(WINDOW, on_mouse)

    print("[GestureMatrix] Playground. Left-drag pans, right-drag pinches/twists.")
    print("  r = reset, ESC = quit")
    try:
        while True:
            m = driver.snapshot()
            frame = render(pattern, m, clip=preset.gestures.clip_child)
            v = decompose(m)
            status = f"scale {v.scale:.2f}  rot {np.degrees(v.rotation):.1f}  " \
                     f"t ({v.translation.x:.0f}, {v.translation.y:.0f})"
            if driver.animating:
                status += f"  [{session.inertial_mode.value}]"
            cv2.putText(frame, status, (12, 28), cv2.FONT_HERSHEY_SIMPLEX, 0.6, (200, 200, 200), 2)
            cv2.imshow(WINDOW, frame)

            key = cv2.waitKey(15) & 0xFF
            if key == 27:  # ESC
                break
            if key in (ord('r'), ord('R')):
                driver.reset()
    except KeyboardInterrupt:
        print("\n[GestureMatrix] exiting")
    finally:
        driver.close()
        cv2.destroyAllWindows()


if __name__ == "__main__":
    main()
