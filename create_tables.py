# create_tables.py

from shiprate.db import Base, engine, init_models

print("正在创建所有数据库表...")

# 导入所有模型，确保它们的元数据被注册
init_models()

# 创建所有在 Base.metadata 中注册的表
Base.metadata.create_all(bind=engine)

print("所有数据库表创建完成！")
