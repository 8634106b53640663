from faker import Faker
from faker.providers import BaseProvider


class TechPulseProvider(BaseProvider):
    """
    TechPulse 专用数据生成器
    生成科技媒体风格的标题
    """

    products = [
        'Pixel', 'Galaxy', 'iPhone', 'MacBook', 'ThinkPad', 'Surface',
        'PlayStation', 'Xbox', 'Switch', 'Steam Deck', 'Kindle', 'Vision Pro'
    ]

    headline_templates = [
        '{product} Review: {verdict}',
        'Hands-on with the New {product}',
        'Is the {product} Still Worth Buying?',
        '{count} Things We Learned from the {product} Launch',
        'The Best {product} Accessories Right Now',
        'Why the {product} Matters for {topic}',
    ]

    verdicts = ['A Bold Step Forward', 'Better Than Expected', 'Close, But Not Quite',
                'The One to Beat', 'Great Hardware, Messy Software']

    topics = ['Developers', 'Gamers', 'Students', 'Creators', 'Privacy', 'Battery Life']

    def tech_headline(self):
        """生成科技新闻标题"""
        template = self.random_element(self.headline_templates)
        return template.format(
            product=self.random_element(self.products),
            verdict=self.random_element(self.verdicts),
            topic=self.random_element(self.topics),
            count=self.random_int(3, 12),
        )


# 初始化 Faker 并添加自定义 Provider
fake = Faker('en_US')
fake.add_provider(TechPulseProvider)
