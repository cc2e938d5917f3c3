"""
pulsewave: 日次の活動量を心電図（ECG）風の波形として描き、GIF/SVG に書き出す。

主な入口は `pulsewave.api`（`render_gif` / `render_svg` / `run_live`）とコンソールスクリプト `pulsewave`。
"""

__version__ = "0.1.0"
