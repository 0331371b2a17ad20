"""
身份解析 - 将请求中的令牌解析为操作人
"""
