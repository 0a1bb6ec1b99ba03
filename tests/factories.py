"""
Item builders for tests
"""
REGION = "us-east-1"
SECONDARY_REGION = "eu-west-1"
SHARED_TABLE = "InviteLinksTable"
ACCOUNT = "ACC1"


def create_table(dynamodb, name):
    return dynamodb.create_table(
        TableName=name,
        KeySchema=[
            {"AttributeName": "PK", "KeyType": "HASH"},
            {"AttributeName": "SK", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "PK", "AttributeType": "S"},
            {"AttributeName": "SK", "AttributeType": "S"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )


def campaign(sk, domain=None, name=None):
    item = {"PK": "CAMPAIGN", "SK": sk, "Name": name or sk}
    if domain is not None:
        item["DomainWhatsAppInviteLinks"] = domain
    return item


def category(sk):
    return {"PK": "WHATSAPP#GROUPCATEGORY", "SK": sk}


def group(sk, campaign="Summer Sale", members=0, invite_code=None, invite_link=None,
          category=None, publishable=True, name=None):
    item = {
        "PK": "WHATSAPP#GROUP",
        "SK": sk,
        "Name": name or f"Group {sk}",
        "Publishable": publishable,
        "Members": members,
    }
    if campaign is not None:
        item["Campaign"] = campaign
    if invite_code is not None:
        item["InviteCode"] = invite_code
    if invite_link is not None:
        item["InviteLink"] = invite_link
    if category is not None:
        item["Category"] = category
    return item


def invite_record(sk, codes, account="ACC1", campaign="", category="", domain=""):
    item = {
        "PK": "WHATSAPP#INVITELINKS",
        "SK": sk,
        "Campaign": campaign,
        "Category": category,
        "Domain": domain,
        "InviteCodes": codes,
        "Updated": "2024-01-01T00:00:00.000Z",
    }
    if account is not None:
        item["AccountSK"] = account
    return item


def put_items(table, items):
    with table.batch_writer() as batch:
        for item in items:
            batch.put_item(Item=item)
