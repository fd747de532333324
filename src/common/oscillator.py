"""
どこで: `common.oscillator`
何を: 時間 t [秒] を入力として周期波形の値を返すオシレータの純粋ロジックを提供。
なぜ: pulse（スケール変調）/fade（不透明度変調）で共通の有界周期関数を使うため。

設計方針:
- 純粋・決定的。副作用なし。
- 波形: sine/triangle/saw_up/saw_down/square/pulse。
- `bipolar(t)` は -1..1、`__call__(t)` は `lo..hi` へ線形射影の上で最終 clamp。
- 位相 `phase` は周期単位（1.0 で 1 周期）。
"""

from __future__ import annotations

import math

WAVES = ("sine", "triangle", "saw_up", "saw_down", "square", "pulse")


def _frac(x: float) -> float:
    """x の小数部（0.0 <= r < 1.0）。負の値にも安定。"""
    r = x - math.floor(x)
    # ULP 誤差ガード
    if r < 0.0 or r >= 1.0:
        return 0.0
    return r


def _apply_skew(phi: float, skew: float) -> float:
    """位相 `phi` (0..1) に歪み `skew` (-1..1) を適用して返す。

    `skew=0` で恒等。実装は指数曲線 `phi**gamma`（gamma∈[0.25,4.0]）。
    """
    s = max(-1.0, min(1.0, float(skew)))
    if s == 0.0:
        return phi
    gamma = 4.0 ** s
    return float(phi**gamma)


def _triangle_bipolar(phi: float) -> float:
    """三角波（-1..1）。phi∈[0,1)。"""
    if phi < 0.5:
        return 4.0 * phi - 1.0
    return 3.0 - 4.0 * phi


def _square_bipolar(phi: float, threshold: float) -> float:
    return 1.0 if phi < threshold else -1.0


class Oscillator:
    """有界周期オシレータ。`bipolar(t)` で -1..1、`__call__(t)` で lo..hi を返す。

    引数:
        wave: 波形種別（`WAVES` のいずれか）。
        freq: 周波数 [Hz]（> 0）。
        phase: 位相 [周期単位]。
        lo, hi: `__call__` の出力範囲（hi > lo）。
        pw: パルス幅（pulse のみ、0<pw<1）。
        skew: 歪み（-1..1）。三角/ノコギリに適用。
    """

    __slots__ = ("_wave", "_freq", "_phase", "_lo", "_hi", "_pw", "_skew")

    def __init__(
        self,
        *,
        wave: str = "sine",
        freq: float = 1.0,
        phase: float = 0.0,
        lo: float = 0.0,
        hi: float = 1.0,
        pw: float = 0.5,
        skew: float = 0.0,
    ) -> None:
        w = (wave or "sine").lower()
        if w not in WAVES:
            raise ValueError(f"未知の波形です: {wave!r}")
        if hi <= lo:
            raise ValueError("hi は lo より大きい必要がある")
        f = float(freq)
        if not math.isfinite(f) or f <= 0.0:
            raise ValueError("freq は正の有限値が必要")
        if w == "pulse" and not (0.0 < pw < 1.0):
            raise ValueError("pw は (0,1) の範囲が必要")

        self._wave = w
        self._freq = f
        self._phase = float(phase)
        self._lo = float(lo)
        self._hi = float(hi)
        self._pw = float(pw)
        self._skew = float(skew)

    @property
    def freq(self) -> float:
        return self._freq

    def bipolar(self, t: float) -> float:
        """時刻 `t` [秒] を評価して -1..1 を返す。"""
        phi = _frac(self._freq * float(t) + self._phase)
        w = self._wave
        if w == "triangle":
            return _triangle_bipolar(_apply_skew(phi, self._skew))
        if w == "saw_up":
            return 2.0 * _apply_skew(phi, self._skew) - 1.0
        if w == "saw_down":
            return 1.0 - 2.0 * _apply_skew(phi, self._skew)
        if w == "square":
            return _square_bipolar(phi, 0.5)
        if w == "pulse":
            return _square_bipolar(phi, self._pw)
        return math.sin(2.0 * math.pi * phi)

    def __call__(self, t: float) -> float:
        """時刻 `t` [秒] を評価して lo..hi の値を返す。"""
        n = (self.bipolar(t) + 1.0) * 0.5
        out = self._lo + (self._hi - self._lo) * n
        # 最終 clamp（数値誤差ガード）
        return min(self._hi, max(self._lo, out))


def oscillator(
    wave: str = "sine",
    *,
    freq: float = 1.0,
    phase: float = 0.0,
    lo: float = 0.0,
    hi: float = 1.0,
    pw: float = 0.5,
    skew: float = 0.0,
) -> Oscillator:
    """Oscillator を構成して返すファクトリ。"""
    return Oscillator(wave=wave, freq=freq, phase=phase, lo=lo, hi=hi, pw=pw, skew=skew)


__all__ = ["WAVES", "Oscillator", "oscillator"]
