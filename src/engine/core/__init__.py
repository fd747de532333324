"""
どこで: `engine.core` サブパッケージ。
何を: 座標変換・アンカー幾何・モーション解決・ランタイム状態・可視判定・フレーム駆動を提供。
なぜ: 描画バックエンドに依存しない純粋計算を集約し、effects/pipeline/api から再利用するため。
"""
