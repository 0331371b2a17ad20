"""
数据模型：ORM 实体、API 模式、领域事件
"""
