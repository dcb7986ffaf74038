"""
Global known-sender catalog inserted at startup.
"""

GLOBAL_KNOWN_SENDERS = [
    {
        "name": "Google Workspace",
        "description": "Google Workspace (formerly G Suite) email services",
        "category": "corporate",
        "website": "https://workspace.google.com",
        "spf_include": "_spf.google.com",
        "ip_ranges": [
            "35.190.247.0/24", "64.233.160.0/19", "66.102.0.0/20", "66.249.80.0/20",
            "72.14.192.0/18", "74.125.0.0/16", "108.177.8.0/21", "172.217.0.0/19",
            "172.217.32.0/20", "172.217.128.0/19", "172.217.160.0/20", "172.217.192.0/19",
            "173.194.0.0/16", "209.85.128.0/17", "216.58.192.0/19", "216.239.32.0/19",
        ],
        "dkim_domains": ["google.com", "gmail.com"],
    },
    {
        "name": "Microsoft 365",
        "description": "Microsoft 365 (formerly Office 365) email services",
        "category": "corporate",
        "website": "https://www.microsoft.com/microsoft-365",
        "spf_include": "spf.protection.outlook.com",
        "ip_ranges": [
            "13.107.6.152/31", "13.107.9.152/31", "13.107.18.10/31", "13.107.19.10/31",
            "40.92.0.0/15", "40.107.0.0/16", "52.100.0.0/14", "104.47.0.0/17",
            "157.55.234.0/24", "207.46.100.0/24", "207.46.163.0/24",
        ],
        "dkim_domains": ["protection.outlook.com", "outlook.com", "hotmail.com", "microsoft.com"],
    },
    {
        "name": "SendGrid",
        "description": "Twilio SendGrid email delivery platform",
        "category": "transactional",
        "website": "https://sendgrid.com",
        "spf_include": "sendgrid.net",
        "ip_ranges": [
            "167.89.0.0/17", "168.245.0.0/16", "208.117.48.0/20",
            "192.254.112.0/20", "198.37.144.0/20", "198.21.0.0/21",
        ],
        "dkim_domains": ["sendgrid.net", "sendgrid.me"],
    },
    {
        "name": "Mailgun",
        "description": "Mailgun email service by Sinch",
        "category": "transactional",
        "website": "https://www.mailgun.com",
        "spf_include": "mailgun.org",
        "ip_ranges": ["69.72.32.0/19", "161.38.192.0/20", "198.61.254.0/24"],
        "dkim_domains": ["mailgun.org", "mailgun.com", "mailgun.info"],
    },
    {
        "name": "Mailchimp",
        "description": "Mailchimp email marketing platform",
        "category": "marketing",
        "website": "https://mailchimp.com",
        "spf_include": "servers.mcsv.net",
        "ip_ranges": ["198.2.128.0/18", "198.2.180.0/24", "198.2.186.0/23", "205.201.128.0/20"],
        "dkim_domains": ["mcsv.net", "mailchimp.com", "mandrillapp.com", "rsgsv.net"],
    },
    {
        "name": "Amazon SES",
        "description": "Amazon Simple Email Service",
        "category": "transactional",
        "website": "https://aws.amazon.com/ses/",
        "spf_include": "amazonses.com",
        "ip_ranges": ["54.240.0.0/18", "69.169.224.0/20", "174.129.0.0/16"],
        "dkim_domains": ["amazonses.com", "amazonaws.com"],
    },
    {
        "name": "Postmark",
        "description": "Postmark transactional email service",
        "category": "transactional",
        "website": "https://postmarkapp.com",
        "spf_include": "spf.mtasv.net",
        "ip_ranges": ["50.31.152.0/24", "146.20.0.0/16"],
        "dkim_domains": ["pm-bounces.com", "postmarkapp.com"],
    },
    {
        "name": "SparkPost",
        "description": "SparkPost email delivery service",
        "category": "transactional",
        "website": "https://www.sparkpost.com",
        "spf_include": "sparkpostmail.com",
        "ip_ranges": ["167.89.0.0/17"],
        "dkim_domains": ["sparkpostmail.com", "sparkpost.com"],
    },
    {
        "name": "Constant Contact",
        "description": "Constant Contact email marketing platform",
        "category": "marketing",
        "website": "https://www.constantcontact.com",
        "spf_include": "spf.constantcontact.com",
        "ip_ranges": ["65.124.128.0/19", "208.75.120.0/21"],
        "dkim_domains": ["constantcontact.com", "ctctcdn.com"],
    },
    {
        "name": "Campaign Monitor",
        "description": "Campaign Monitor email marketing platform",
        "category": "marketing",
        "website": "https://www.campaignmonitor.com",
        "spf_include": "_spf.createsend.com",
        "ip_ranges": ["103.28.250.0/24", "103.99.72.0/22"],
        "dkim_domains": ["createsend.com", "campaignmonitor.com"],
    },
    {
        "name": "Yahoo Mail",
        "description": "Yahoo Mail email service",
        "category": "corporate",
        "website": "https://mail.yahoo.com",
        "ip_ranges": [
            "66.94.224.0/19", "67.195.0.0/16", "74.6.0.0/16",
            "98.136.0.0/14", "202.160.176.0/20",
        ],
        "dkim_domains": ["yahoo.com", "yahoodns.net"],
    },
    {
        "name": "Zoho Mail",
        "description": "Zoho Mail email hosting service",
        "category": "corporate",
        "website": "https://www.zoho.com/mail/",
        "spf_include": "zoho.com",
        "ip_ranges": ["136.143.190.0/23", "136.143.186.0/23"],
        "dkim_domains": ["zoho.com", "zohomail.com"],
    },
    {
        "name": "HubSpot",
        "description": "HubSpot marketing and CRM platform",
        "category": "marketing",
        "website": "https://www.hubspot.com",
        "ip_ranges": ["23.21.109.0/24", "23.21.109.197/32"],
        "dkim_domains": ["hubspot.com", "hs-email.net"],
    },
    {
        "name": "Salesforce Marketing Cloud",
        "description": "Salesforce Marketing Cloud (formerly ExactTarget)",
        "category": "marketing",
        "website": "https://www.salesforce.com/products/marketing-cloud/",
        "spf_include": "cust-spf.exacttarget.com",
        "ip_ranges": ["136.147.0.0/16"],
        "dkim_domains": ["exacttarget.com", "salesforce.com"],
    },
    {
        "name": "Zendesk",
        "description": "Zendesk customer support platform emails",
        "category": "transactional",
        "website": "https://www.zendesk.com",
        "spf_include": "mail.zendesk.com",
        "ip_ranges": ["192.161.144.0/20"],
        "dkim_domains": ["zendesk.com"],
    },
]
