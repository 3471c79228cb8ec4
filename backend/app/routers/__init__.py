"""
SMBE 路由模块包 (SMBE Router Module Package)

=== 报表路由 (Report Routes) ===
- availability.py: 物理可用率（PA 报表、单台设备故障时长表、PA 明细 CSV 导出）

路由注册:
所有路由模块在 main.py 中通过 app.include_router() 统一注册，
当前所有API使用 v1 版本前缀 (/api/v1/)。

Author: SMBE Team
"""
