# litehelper/config: environment-driven defaults
