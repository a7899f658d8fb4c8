"""服务层：认证解析、git 访问、拉取编排"""
