"""
Message catalog for alert titles and lines, in English and Chinese.

Every key must exist in every language; ``tests/test_composer.py`` checks it.
"""

SEPARATOR = "-----------------------------"

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "region": "Region: {region}",
        "cluster_list": "Cluster List: {link}",
        "doc": "Doc: {link}",
        "processing": "Processing: {link}",
        # Fleet check
        "fleet_title": "EKS clusters need to be upgraded",
        "fleet_expired": (
            "Cluster {name} with version {version} has reached end of support "
            "{days} days ago. Please upgrade as soon as possible."
        ),
        "fleet_expiring": (
            "Cluster {name} with version {version} will reach end of support on "
            "{end} ({days} days left). Please upgrade as soon as possible."
        ),
        # CreateCluster
        "new_cluster_title": "Risk alert for creating EKS cluster with lower version",
        "new_cluster_expired": (
            "Detected a new cluster named {name} with version {version} that has "
            "reached end of support {days} days ago. Please upgrade as soon as possible."
        ),
        "new_cluster_expiring": (
            "Detected that a new cluster named {name} with version {version} is "
            "outdated, and this version will reach end of support on {end} "
            "({days} days left). It is recommended to rebuild the cluster with a "
            "higher version, unless necessary."
        ),
        # Self-upgrade
        "upgrade_title": "EKS-Notifier needs to be upgraded",
        "upgrade_available": (
            "The latest version of EKS-Notifier is {latest}, and the current "
            "version is {current}. Click the link to upgrade: {link}"
        ),
        "upgrade_copy_variables": "Please make sure to copy the following variables:",
        "upgrade_app_name": "【Application name】{app_name}",
        "upgrade_topic_arn": "【SnsArn】{topic_arn}",
        # Lifecycle
        "cluster_deleting_title": "Deleting an EKS Cluster",
        "cluster_deleting": "Cluster {name} is being deleted...",
        "stack_updating_title": "EKS-Notifier Updating",
        "stack_updating": "{app_name} is updating...",
        "stack_updated_title": "EKS-Notifier Updated",
        "stack_updated": "{app_name} Updated, Version: {version}, will check clusters again...",
        "stack_deleting_title": "EKS-Notifier Deleting",
        "stack_deleting": "{app_name} deleting... You will no longer receive EKS notifications.",
        "stack_created_title": "EKS-Notifier Created",
        "stack_created": "{app_name} created, will check clusters...",
    },
    "zh": {
        "region": "区域：{region}",
        "cluster_list": "集群列表：{link}",
        "doc": "参考页面：{link}",
        "processing": "处理进度：{link}",
        "fleet_title": "EKS重要通知",
        "fleet_expired": "集群 {name} 版本 {version} 已停止支持 {days} 天，请尽快升级。",
        "fleet_expiring": "集群 {name} 版本 {version} 将在 {end} （{days}天后） 停止支持，请尽快升级。",
        "new_cluster_title": "创建低版本EKS集群风险提示",
        "new_cluster_expired": "检测到新建集群 {name} 版本 {version} 已停止支持 {days} 天，请尽快升级。",
        "new_cluster_expiring": (
            "检测到新建集群 {name} 版本 {version} 将在 {end} （{days}天后） 停止支持，"
            "如非必要，建议使用更高版本重建集群。"
        ),
        "upgrade_title": "EKS-Notifier 需要升级",
        "upgrade_available": "EKS-Notifier 最新版本为 {latest}，当前版本为 {current}，点击链接升级：{link}",
        "upgrade_copy_variables": "请务必复制以下变量：",
        "upgrade_app_name": "【应用名称】{app_name}",
        "upgrade_topic_arn": "【SnsArn】{topic_arn}",
        "cluster_deleting_title": "正在删除EKS集群",
        "cluster_deleting": "集群 {name} 正在删除...",
        "stack_updating_title": "EKS-Notifier 更新中",
        "stack_updating": "{app_name} 正在更新...",
        "stack_updated_title": "EKS-Notifier 已更新",
        "stack_updated": "{app_name} 已更新，版本：{version}，将重新检查集群...",
        "stack_deleting_title": "EKS-Notifier 删除中",
        "stack_deleting": "{app_name} 正在删除... 您将不再收到EKS通知。",
        "stack_created_title": "EKS-Notifier 已创建",
        "stack_created": "{app_name} 已创建，将检查集群...",
    },
}


def t(language: str, key: str, **kwargs) -> str:
    """Format a catalog entry, falling back to English for unknown languages."""
    catalog = MESSAGES.get(language, MESSAGES["en"])
    return catalog[key].format(**kwargs)
