# litehelper/utils: path helpers
