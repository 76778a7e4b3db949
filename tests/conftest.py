"""
Test configuration and fixtures for the report generator tests.

Provides small pilot and production configuration exports that differ in a
known way, plus helpers shared by the unit tests.
"""

from pathlib import Path

import pytest

from syncdiff.core import BookmarkManager, OperationContext, ReportRenderer
from syncdiff.snapshot import XmlSnapshot

CONTOSO_GUID = "{5A5B1C2D-0000-4000-8000-000000000001}"
HR_GUID = "{5A5B1C2D-0000-4000-8000-000000000002}"
PARTITION_GUID = "{11111111-AAAA-4000-8000-000000000001}"

DSML_SCHEMA = """
<schema>
  <dsml:dsml xmlns:dsml="http://www.dsml.org/DSML"
             xmlns:ms-dsml="http://www.microsoft.com/MMS/DSML">
    <dsml:directory-schema>
      <dsml:attribute-type id="displayName" single-value="true" ms-dsml:indexable="true">
        <dsml:name>displayName</dsml:name>
        <dsml:syntax>1.3.6.1.4.1.1466.115.121.1.15</dsml:syntax>
      </dsml:attribute-type>
      <dsml:attribute-type id="mail" single-value="true" ms-dsml:indexable="false">
        <dsml:name>mail</dsml:name>
        <dsml:syntax>1.3.6.1.4.1.1466.115.121.1.15</dsml:syntax>
      </dsml:attribute-type>
      <dsml:attribute-type id="objectSid" single-value="true">
        <dsml:name>objectSid</dsml:name>
        <dsml:syntax>1.3.6.1.4.1.1466.115.121.1.5</dsml:syntax>
      </dsml:attribute-type>
      <dsml:attribute-type id="member">
        <dsml:name>member</dsml:name>
        <dsml:syntax>1.3.6.1.4.1.1466.115.121.1.12</dsml:syntax>
      </dsml:attribute-type>
    </dsml:directory-schema>
  </dsml:dsml>
</schema>
"""

USER_COMMON_RULE_PILOT = f"""
<synchronizationRule>
  <name>In from AD - User Common</name>
  <id>{{AAAA0001-0000-4000-8000-000000000001}}</id>
  <connector>{CONTOSO_GUID}</connector>
  <direction>Inbound</direction>
  <linkType>Provision</linkType>
  <precedence>100</precedence>
  <disabled>false</disabled>
  <sourceObjectType>user</sourceObjectType>
  <targetObjectType>person</targetObjectType>
  <synchronizationCriteria>
    <conditions>
      <scope>
        <csAttribute>isCriticalSystemObject</csAttribute>
        <csOperator>NOTEQUAL</csOperator>
        <csValue>TRUE</csValue>
      </scope>
    </conditions>
  </synchronizationCriteria>
  <attribute-mappings>
    <mapping>
      <dest>displayName</dest>
      <src><attr>displayName</attr></src>
      <mappingType>Direct</mappingType>
    </mapping>
    <mapping>
      <dest>mail</dest>
      <src><attr>mail</attr></src>
      <mappingType>Direct</mappingType>
    </mapping>
  </attribute-mappings>
</synchronizationRule>
"""

USER_COMMON_RULE_PRODUCTION = f"""
<synchronizationRule>
  <name>In from AD - User Common</name>
  <id>{{AAAA0001-0000-4000-8000-000000000001}}</id>
  <connector>{CONTOSO_GUID.lower()}</connector>
  <direction>Inbound</direction>
  <linkType>Provision</linkType>
  <precedence>50</precedence>
  <disabled>false</disabled>
  <sourceObjectType>user</sourceObjectType>
  <targetObjectType>person</targetObjectType>
  <synchronizationCriteria>
    <conditions>
      <scope>
        <csAttribute>isCriticalSystemObject</csAttribute>
        <csOperator>NOTEQUAL</csOperator>
        <csValue>TRUE</csValue>
      </scope>
    </conditions>
  </synchronizationCriteria>
  <attribute-mappings>
    <mapping>
      <dest>displayName</dest>
      <src><attr>displayName</attr></src>
      <mappingType>Direct</mappingType>
    </mapping>
  </attribute-mappings>
</synchronizationRule>
"""

USER_JOIN_RULE = f"""
<synchronizationRule>
  <name>In from AD - User Join</name>
  <id>{{AAAA0002-0000-4000-8000-000000000002}}</id>
  <connector>{CONTOSO_GUID}</connector>
  <direction>Inbound</direction>
  <linkType>Join</linkType>
  <precedence>101</precedence>
  <disabled>false</disabled>
  <sourceObjectType>user</sourceObjectType>
  <targetObjectType>person</targetObjectType>
  <relationshipCriteria>
    <conditions>
      <condition>
        <csAttribute>objectSid</csAttribute>
        <mvAttribute>objectSidString</mvAttribute>
        <caseSensitive>false</caseSensitive>
      </condition>
    </conditions>
  </relationshipCriteria>
</synchronizationRule>
"""

GROUP_COMMON_RULE = f"""
<synchronizationRule>
  <name>In from AD - Group Common</name>
  <id>{{AAAA0004-0000-4000-8000-000000000004}}</id>
  <connector>{CONTOSO_GUID}</connector>
  <direction>Inbound</direction>
  <linkType>Provision</linkType>
  <precedence>104</precedence>
  <disabled>false</disabled>
  <sourceObjectType>group</sourceObjectType>
  <targetObjectType>group</targetObjectType>
  <attribute-mappings>
    <mapping>
      <dest>member</dest>
      <src><attr>member</attr></src>
      <mappingType>Direct</mappingType>
    </mapping>
  </attribute-mappings>
</synchronizationRule>
"""

USER_IDENTITY_OUTBOUND_RULE = f"""
<synchronizationRule>
  <name>Out to AD - User Identity</name>
  <id>{{AAAA0003-0000-4000-8000-000000000003}}</id>
  <connector>{CONTOSO_GUID}</connector>
  <direction>Outbound</direction>
  <linkType>Join</linkType>
  <precedence>120</precedence>
  <disabled>false</disabled>
  <sourceObjectType>person</sourceObjectType>
  <targetObjectType>user</targetObjectType>
  <attribute-mappings>
    <mapping>
      <dest>sourceAnchor</dest>
      <expression>ConvertToBase64([objectGUID])</expression>
      <mappingType>Expression</mappingType>
      <executeOnce>true</executeOnce>
    </mapping>
  </attribute-mappings>
</synchronizationRule>
"""

PILOT_XML = f"""
<export>
  <ma-data>
    <name>contoso.com</name>
    <id>{CONTOSO_GUID.lower()}</id>
    <category>AD</category>
    <description>Contoso forest</description>
    <creation-time>2024-01-01 08:00:00.000</creation-time>
    <last-modification-time>2024-01-10 08:00:00.000</last-modification-time>
    <ma-partition-data>
      <partition>
        <id>{PARTITION_GUID}</id>
        <name>DC=contoso,DC=com</name>
        <filter>
          <object-classes>
            <object-class>user</object-class>
            <object-class>group</object-class>
          </object-classes>
        </filter>
      </partition>
    </ma-partition-data>
    <attribute-inclusion>
      <attribute>displayName</attribute>
      <attribute>mail</attribute>
      <attribute>objectSid</attribute>
      <attribute>extensionAttribute1</attribute>
    </attribute-inclusion>
    {DSML_SCHEMA}
    <ma-run-data>
      <run-configuration>
        <name>Delta Import</name>
        <configuration>
          <step>
            <step-type type="delta-import">
              <import-subtype>to-cs</import-subtype>
            </step-type>
            <partition>{PARTITION_GUID.lower()}</partition>
            <threshold>
              <object>500</object>
            </threshold>
          </step>
        </configuration>
      </run-configuration>
      <run-configuration>
        <name>Full Synchronization</name>
        <configuration>
          <step>
            <step-type type="apply-rules">
              <apply-rules-subtype>reevaluate-flow-connectors</apply-rules-subtype>
            </step-type>
            <partition>{PARTITION_GUID}</partition>
          </step>
        </configuration>
      </run-configuration>
    </ma-run-data>
  </ma-data>
  {USER_COMMON_RULE_PILOT}
  {USER_JOIN_RULE}
  {USER_IDENTITY_OUTBOUND_RULE}
</export>
"""

PRODUCTION_XML = f"""
<export>
  <ma-data>
    <name>contoso.com</name>
    <id>{CONTOSO_GUID}</id>
    <category>AD</category>
    <description>Contoso production forest</description>
    <creation-time>2024-01-01 08:00:00.000</creation-time>
    <last-modification-time>2024-03-02 17:30:00.000</last-modification-time>
    <ma-partition-data>
      <partition>
        <id>{PARTITION_GUID}</id>
        <name>DC=contoso,DC=com</name>
        <filter>
          <object-classes>
            <object-class>user</object-class>
            <object-class>contact</object-class>
          </object-classes>
        </filter>
      </partition>
    </ma-partition-data>
    <attribute-inclusion>
      <attribute>displayName</attribute>
      <attribute>mail</attribute>
    </attribute-inclusion>
    {DSML_SCHEMA}
    <ma-run-data>
      <run-configuration>
        <name>Delta Import</name>
        <configuration>
          <step>
            <step-type type="delta-import">
              <import-subtype>to-cs</import-subtype>
            </step-type>
            <partition>{PARTITION_GUID}</partition>
            <threshold>
              <object>1000</object>
            </threshold>
          </step>
        </configuration>
      </run-configuration>
      <run-configuration>
        <name>Export</name>
        <configuration>
          <step>
            <step-type type="export"/>
            <partition>{PARTITION_GUID}</partition>
          </step>
        </configuration>
      </run-configuration>
    </ma-run-data>
  </ma-data>
  <ma-data>
    <name>HR</name>
    <id>{HR_GUID}</id>
    <category>Extensible2</category>
    <description>HR system</description>
    <creation-time>2024-02-01 08:00:00.000</creation-time>
    <last-modification-time>2024-02-01 08:00:00.000</last-modification-time>
  </ma-data>
  {USER_COMMON_RULE_PRODUCTION}
  {GROUP_COMMON_RULE}
  {USER_IDENTITY_OUTBOUND_RULE}
</export>
"""


@pytest.fixture
def pilot_snapshot() -> XmlSnapshot:
    """
    Pilot configuration export.

    Why: Entity, documenter and assembler tests need a realistic pilot side
    What: Provides the contoso.com connector with three rules and two run profiles
    How: Parses the PILOT_XML document from memory
    """
    return XmlSnapshot.from_string(PILOT_XML, source="pilot.xml")


@pytest.fixture
def production_snapshot() -> XmlSnapshot:
    """
    Production configuration export.

    Why: Diffs need a production side differing from pilot in known ways
    What: Provides contoso.com with changed settings plus a production-only HR connector
    How: Parses the PRODUCTION_XML document from memory
    """
    return XmlSnapshot.from_string(PRODUCTION_XML, source="production.xml")


@pytest.fixture
def snapshot_files(tmp_path: Path) -> tuple[Path, Path]:
    """
    Pilot and production exports written to disk.

    Why: File loading and the CLI read snapshots from paths
    What: Provides paths of the two sample exports
    How: Writes PILOT_XML and PRODUCTION_XML into the test's temporary directory
    """
    pilot_path = tmp_path / "pilot.xml"
    production_path = tmp_path / "production.xml"
    pilot_path.write_text(PILOT_XML, encoding="utf-8")
    production_path.write_text(PRODUCTION_XML, encoding="utf-8")
    return pilot_path, production_path


@pytest.fixture
def operation_context() -> OperationContext:
    """
    Operation context of the contoso.com connector.

    Why: Extraction functions resolve the connector through the context
    What: Provides a context with the contoso.com name and GUID
    How: Builds a fresh context with an empty diagnostics list
    """
    return OperationContext(
        connector_name="contoso.com", connector_guid=CONTOSO_GUID, category="AD"
    )


@pytest.fixture
def renderer() -> ReportRenderer:
    """
    Renderer with a fresh bookmark manager.

    Why: Rendering tests must not share bookmark codes between tests
    What: Provides a ReportRenderer over the packaged templates
    How: Creates a new BookmarkManager per test
    """
    return ReportRenderer(BookmarkManager())
