# 配置管理工具

import json
import os
import logging
from typing import Dict, Any
import re

MEMORY_DB_PATH = ':memory:'


def _replace_env_vars(value: str) -> str:
    """
    替换环境变量占位符
    将 ${ENV_VAR} 格式的占位符替换为实际的环境变量值
    """
    def replace_match(match):
        env_var = match.group(1)
        return os.getenv(env_var, match.group(0))  # 环境变量不存在时保持原样

    return re.sub(r'\$\{([^}]+)\}', replace_match, value)


def _process_config_values(config: Any) -> Any:
    """
    递归处理配置值，替换环境变量
    """
    if isinstance(config, dict):
        return {k: _process_config_values(v) for k, v in config.items()}
    elif isinstance(config, list):
        return [_process_config_values(item) for item in config]
    elif isinstance(config, str):
        return _replace_env_vars(config)
    else:
        return config


def _server_dir() -> str:
    script_dir = os.path.dirname(os.path.abspath(__file__))
    return os.path.dirname(script_dir)


def load_config() -> Dict[str, Any]:
    """
    加载配置文件
    根据 CONFIG_ENV 环境变量选择配置文件

    Returns:
        配置字典
    """
    config_env = os.getenv('CONFIG_ENV', 'development')

    config_files = {
        'production': 'config/config-prod.json',
        'development': 'config/config-dev.json',
        'testing': 'config/config-test.json'
    }

    config_file = config_files.get(config_env, 'config/config.json')

    if not os.path.isabs(config_file):
        config_file = os.path.join(_server_dir(), config_file)

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config = json.load(f)

        config = _process_config_values(config)

        logging.info(f"成功加载配置文件: {config_file}")
        return config

    except FileNotFoundError:
        logging.error(f"配置文件不存在: {config_file}")
        raise
    except json.JSONDecodeError as e:
        logging.error(f"配置文件JSON格式错误: {e}")
        raise


def get_storage_path(config: Dict[str, Any]) -> str:
    """
    获取存储数据库路径（相对路径以 server 目录为基准）
    """
    db_path = config.get('storage', {}).get('path', 'data/tofu_pos.db')

    if db_path != MEMORY_DB_PATH and not os.path.isabs(db_path):
        db_path = os.path.join(_server_dir(), db_path)

    return db_path


def validate_config(config: Dict[str, Any]) -> bool:
    """
    验证配置文件的完整性
    """
    required_sections = ['app', 'server', 'storage', 'logging']

    for section in required_sections:
        if section not in config:
            logging.error(f"配置文件缺少必需的section: {section}")
            return False

    return True


class Config:
    """
    配置管理类
    """
    def __init__(self):
        self.env = os.getenv('CONFIG_ENV', 'development')
        self.config = load_config()

        if not validate_config(self.config):
            raise ValueError("配置文件验证失败")

    def get(self, key: str, default=None):
        """
        获取配置项，支持点号分隔的嵌套键

        Args:
            key: 配置键，支持 'app.name' 格式
            default: 默认值
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def get_storage_config(self) -> Dict[str, Any]:
        storage_config = self.config.get('storage', {}).copy()
        storage_config['path'] = get_storage_path(self.config)
        return storage_config
