import os
import sys

# 将项目根目录加入 sys.path，测试可直接导入 models / detectors / evaluators
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hypothesis import settings

# CI: 更多样例；dev: 本地快速迭代
settings.register_profile("ci", max_examples=300, deadline=None)
settings.register_profile("dev", max_examples=100)
settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "dev"))
