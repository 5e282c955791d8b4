# litehelper/core: leaf modules: constants, enums, exceptions
