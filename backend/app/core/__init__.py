"""
核心模块包 (Core Module Package)

SMBE 后端的核心基础设施：配置管理、数据库连接、安全认证、依赖注入和统一异常处理。

Core infrastructure for the SMBE backend: configuration, database connections,
security, dependency injection and unified exception handling.
"""
