"""API package - 监控会话 HTTP 控制接口"""
